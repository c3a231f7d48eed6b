import os
from pathlib import Path
import yaml
from dotenv import load_dotenv

from utils.logger import logger

def load_cfg(cfg_path: str | None = None):

    base_dir = Path(__file__).resolve().parents[1]

    cfg_file = Path(cfg_path) if cfg_path else (base_dir / "config.yaml")
    if not cfg_file.is_absolute() and not cfg_file.exists():
        # relative paths also resolve against the repo root
        cfg_file = base_dir / cfg_file
    if not cfg_file.exists():
        raise FileNotFoundError(f"config not found: {cfg_file}")

    load_dotenv(base_dir / ".env")

    with open(cfg_file, "r", encoding="utf-8") as f:
        raw_cfg = yaml.safe_load(f) or {}

    def resolve_env(obj):
        if isinstance(obj, dict):
            return {k: resolve_env(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [resolve_env(v) for v in obj]
        if isinstance(obj, str) and obj.startswith("${") and obj.endswith("}"):
            varname = obj[2:-1]
            return os.getenv(varname, "")
        return obj

    cfg = resolve_env(raw_cfg)

    def contains_mainnet(obj):
        if isinstance(obj, dict):
            for k, v in obj.items():
                if k == "cluster" and str(v).lower() == "mainnet-beta":
                    return True
                if contains_mainnet(v):
                    return True
        elif isinstance(obj, list):
            return any(contains_mainnet(v) for v in obj)
        return False

    if contains_mainnet(cfg):
        logger.warning("Mainnet cluster configured, balances reflect real funds")

    return cfg

from wallet.errors import ChannelError
from wallet.models import (
    AccountIdentity, AssetDescriptor, AssetBalance, NativeBalance, BalanceSnapshot,
    Loading, Ready, Failed, NO_ACCOUNT, asset_display_amount,
)
from wallet.app.balance_view import BalanceView

I1 = AccountIdentity("9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin")
SLTC = AssetDescriptor(mint="Gzd3wZWCFToRnpmSqD1GaPsuT9ErfJ7G17ZZYNMs7D9c", symbol="sLTC")


def ready(lamports, asset=None):
    snap = BalanceSnapshot(identity=I1, native=NativeBalance(lamports), asset=asset, generation=1)
    return Ready(snapshot=snap)


def test_no_account_prompts_to_connect():
    cards = BalanceView(SLTC).render(NO_ACCOUNT)
    assert len(cards) == 1
    assert cards[0]["title"] == "Balances"
    assert "Connect a wallet" in cards[0]["lines"][0]


def test_loading_shows_placeholders():
    cards = BalanceView(SLTC).render(Loading(identity=I1, generation=1))
    by_title = {c["title"]: c for c in cards}
    assert by_title["Wallet"]["lines"] == [I1.address]
    assert by_title["SOL"]["lines"] == ["… SOL"]
    assert by_title["sLTC"]["lines"][0] == "…"
    assert by_title["sLTC"]["lines"][1] == f"Mint: {SLTC.mint}"


def test_ready_without_holder_record_renders_zero():
    cards = BalanceView(SLTC).render(ready(2_500_000_000))
    by_title = {c["title"]: c for c in cards}
    assert by_title["SOL"]["lines"] == ["2.5000 SOL"]
    assert by_title["sLTC"]["lines"][0] == "0"


def test_ready_with_holder_record():
    asset = AssetBalance(amount=150_000_000, decimals=8, ui_amount=1.5)
    cards = BalanceView(SLTC).render(ready(123_456_789, asset))
    by_title = {c["title"]: c for c in cards}
    assert by_title["SOL"]["lines"] == ["0.1235 SOL"]
    assert by_title["sLTC"]["lines"][0] == "1.5"


def test_failed_offers_retry():
    state = Failed(identity=I1, reason="timeout", generation=3, error=ChannelError("timeout"))
    cards = BalanceView(SLTC).render(state)
    err = cards[-1]
    assert err["title"] == "Error"
    assert err["retry"] is True
    assert "timeout" in err["lines"][0]


def test_format_lines():
    text = BalanceView(SLTC, native_symbol="SOL").format_lines(ready(1_000_000_000))
    assert "[SOL]" in text
    assert "  1.0000 SOL" in text


def test_absent_and_zero_render_alike():
    zero = AssetBalance(amount=0, decimals=8, ui_amount=0.0)
    assert asset_display_amount(None) == asset_display_amount(zero) == 0.0
    view = BalanceView(SLTC)
    absent_lines = view.render(ready(0))[2]["lines"][0]
    zero_lines = view.render(ready(0, zero))[2]["lines"][0]
    assert absent_lines == zero_lines == "0"

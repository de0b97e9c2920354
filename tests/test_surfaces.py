from __future__ import annotations

from controllers.trade_controller import _parse_start_payload
from enums.trade_action import TradeAction
from schemas.template_schema import TemplateCreate
from services.render_service import build_document
from services.telegram_bot import to_markup
from utils import keyboards

USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


def test_start_payload_parsing():
    assert _parse_start_payload(f"buy_{USDC}") == (TradeAction.BUY, USDC)
    assert _parse_start_payload(f"sell_{USDC}") == (TradeAction.SELL, USDC)
    assert _parse_start_payload("ref_abc") == (None, None)
    assert _parse_start_payload("buy_") == (None, None)
    assert _parse_start_payload(None) == (None, None)


def test_reply_rows_become_inline_keyboard():
    assert to_markup(None) is None
    markup = to_markup(keyboards.main_menu())
    first = markup.inline_keyboard[0][0]
    assert first.text == "🛒 Buy"
    assert first.callback_data == "buy"
    assert markup.inline_keyboard[1][0].callback_data == "my_wallet"


def test_template_form_validation():
    ok = TemplateCreate(name="  promo ", html="<div></div>", css="div {}")
    assert ok.is_valid
    assert ok.name == "promo"

    bad = TemplateCreate(name=" ", html="", css="")
    assert len(bad.errors()) == 3
    assert not TemplateCreate(name="x" * 81, html="<p></p>", css="p {}").is_valid


def test_render_document_wraps_html_and_css():
    doc = build_document("<div class='card'>hi</div>", ".card { color: red; }")
    assert doc.startswith("<!DOCTYPE html>")
    assert "<style>body { margin: 0; padding: 0; } .card { color: red; }</style>" in doc
    assert "<div class='card'>hi</div>" in doc

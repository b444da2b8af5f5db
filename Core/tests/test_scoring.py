from __future__ import annotations

from healplay.core.dom_index import DomIndex
from healplay.utils.scoring import (
    ScoringProfile,
    build_selector,
    extract_tokens,
    heuristic_heal,
    score_candidates,
)


def test_extract_tokens_strips_syntax_and_short_tokens():
    assert extract_tokens("#login-button-invalid") == ["login", "button", "invalid"]
    assert extract_tokens("[data-test='go'] .a") == ["data", "test"]


def test_extract_tokens_moves_affinity_tokens_first():
    assert extract_tokens("#submit-button-for-login") == ["login", "button", "submit", "for"]


def test_extract_tokens_deduplicates_and_is_stable():
    selector = "div.Primary-primary > #SAVE_save"
    assert extract_tokens(selector) == ["div", "primary", "save"]
    assert extract_tokens(selector) == extract_tokens(selector)


def test_heals_login_button_inside_container(login_page):
    assert heuristic_heal(DomIndex(login_page), "#login-button-invalid") == "#login-button"


def test_selects_single_clickable_whose_id_matches_a_token():
    markup = """
    <div id="toolbar-panel">
      <button id="checkout">Checkout</button>
      <span id="cart">Cart</span>
    </div>
    """
    assert heuristic_heal(DomIndex(markup), "#checkout-old", ScoringProfile((), ())) == "#checkout"


def test_skips_structural_candidates():
    markup = """
    <button id="login-button-container">Login</button>
    <button class="panel-button">Login</button>
    <button id="signin">Sign in</button>
    """
    assert heuristic_heal(DomIndex(markup), "#login-button-invalid") == "#signin"


def test_wrapper_data_test_is_penalised_below_plain_candidate():
    markup = """
    <button data-test="login-wrapper">Login</button>
    <input type="submit" name="go" value="Sign in">
    """
    healed = heuristic_heal(DomIndex(markup), "#login-button-invalid")
    assert healed == 'input[name="go"]'
    assert "wrapper" not in healed


def test_rejects_winner_whose_selector_names_a_container():
    markup = '<button data-testid="login-container">Login</button>'
    assert heuristic_heal(DomIndex(markup), "#login-button-invalid") is None


def test_returns_none_without_clickable_candidates():
    markup = "<div id='login-button'>Login</div><span>nothing</span>"
    assert heuristic_heal(DomIndex(markup), "#login-button-invalid") is None


def test_prefers_button_over_link_with_same_signals():
    markup = """
    <a class="btn" data-test="save">Save</a>
    <button data-test="save">Save</button>
    """
    ranked = score_candidates(DomIndex(markup), extract_tokens("#save-old"))
    assert ranked[0].element.tag == "button"
    assert ranked[0].selector == '[data-test="save"]'


def test_data_test_outweighs_class_match():
    markup = """
    <button class="purchase">Buy</button>
    <button data-test="purchase-now">Now</button>
    """
    assert heuristic_heal(DomIndex(markup), ".purchase-btn", ScoringProfile((), ())) == '[data-test="purchase-now"]'


def test_build_selector_preference_order():
    def record(markup):
        return DomIndex(markup).matches("button")[0]

    assert build_selector(record('<button id="a" data-test="b">x</button>')) == "#a"
    assert build_selector(record('<button id="a-wrapper" data-test="b">x</button>')) == '[data-test="b"]'
    assert build_selector(record('<button data-testid="c" name="n">x</button>')) == '[data-testid="c"]'
    assert build_selector(record('<button name="n" aria-label="Go">x</button>')) == 'button[name="n"]'
    assert build_selector(record('<button aria-label="Go now">x</button>')) == 'button[aria-label*="Go now"]'
    assert build_selector(record('<button class="primary big">x</button>')) == ".primary"
    assert build_selector(record('<button class="container">x</button>')) == "button"
    assert build_selector(record("<button>x</button>")) == "button"


def test_ties_go_to_buttons_before_earlier_inputs():
    markup = "<input type='submit' id='alpha'><button id='beta'>x</button>"
    ranked = score_candidates(DomIndex(markup), extract_tokens("#zzz-old"))
    assert ranked[0].score == ranked[1].score
    assert heuristic_heal(DomIndex(markup), "#zzz-old") == "#beta"

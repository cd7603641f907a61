import pytest
from typer.testing import CliRunner

import cli
from flashdeck.crud import add_card
from flashdeck.schemas import CardCreate

runner = CliRunner()


@pytest.fixture(autouse=True)
def use_test_state(monkeypatch, state):
    monkeypatch.setattr(cli, "get_state", lambda: state)


def test_create_and_list_decks(state):
    result = runner.invoke(cli.app, ["create-deck", "--name", "Capitals", "--description", "Europe"])
    assert result.exit_code == 0
    assert "Deck created" in result.output

    result = runner.invoke(cli.app, ["list-decks"])
    assert result.exit_code == 0
    assert "Capitals" in result.output


def test_add_card_by_id_prefix(state, deck):
    result = runner.invoke(cli.app, [
        "add-card", "--deck-id", deck.id[:8], "--question", "Capital of France?", "--answer", "Paris"
    ])
    assert result.exit_code == 0
    assert len(state.decks[deck.id].cards) == 1


def test_add_card_unknown_deck(state):
    result = runner.invoke(cli.app, ["add-card", "--deck-id", "nope", "--question", "Q", "--answer", "A"])
    assert result.exit_code == 0
    assert "not found" in result.output
    assert state.cards == {}


def test_study_session(state, deck):
    card = add_card(state, deck.id, CardCreate(question="Capital of France?", answer="Paris"))
    result = runner.invoke(cli.app, ["study", "--deck-id", deck.id], input="\n2\n")
    assert result.exit_code == 0
    assert "Paris" in result.output
    assert "Session complete" in result.output
    assert state.cards[card.id].interval == 1
    assert state.session is None


def test_study_rejects_bad_grade(state, deck):
    card = add_card(state, deck.id, CardCreate(question="Capital of France?", answer="Paris"))
    result = runner.invoke(cli.app, ["study"], input="\n7\n3\n")
    assert result.exit_code == 0
    assert "Enter a grade from 0 to 3" in result.output
    assert state.cards[card.id].interval == 3


def test_study_nothing_due(state, deck):
    result = runner.invoke(cli.app, ["study"])
    assert result.exit_code == 0
    assert "Nothing due" in result.output


def test_stats(state, deck):
    add_card(state, deck.id, CardCreate(question="Capital of France?", answer="Paris"))
    result = runner.invoke(cli.app, ["study"], input="\n0\n")
    assert result.exit_code == 0

    result = runner.invoke(cli.app, ["stats"])
    assert result.exit_code == 0
    assert "Retention: 0.0%" in result.output
    assert "Total reviews: 1" in result.output


def test_reset_data(state, deck):
    result = runner.invoke(cli.app, ["reset-data"], input="y\n")
    assert result.exit_code == 0
    assert state.decks == {}

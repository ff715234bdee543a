import pytest
from prompt_toolkit.document import Document
from prompt_toolkit.validation import ValidationError

from clife import prompts


def test_validator_accepts_good_names():
    prompts.NameValidator().validate(Document("meeting_notes"))


@pytest.mark.parametrize("text", ["", "two words", "semi;colon"])
def test_validator_rejects_bad_names(text):
    with pytest.raises(ValidationError):
        prompts.NameValidator().validate(Document(text))


def test_ask_name_returns_none_when_cancelled(monkeypatch):
    def cancel(*args, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(prompts, "prompt", cancel)
    assert prompts.ask_name("note") is None


def test_ask_name_strips_answer(monkeypatch):
    monkeypatch.setattr(prompts, "prompt", lambda *args, **kwargs: "  idea  ")
    assert prompts.ask_name("note") == "idea"


def test_confirm_delete_cancel_means_no(monkeypatch):
    def cancel(*args, **kwargs):
        raise EOFError

    monkeypatch.setattr(prompts, "confirm", cancel)
    assert prompts.confirm_delete("a.md") is False

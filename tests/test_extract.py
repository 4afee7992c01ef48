import pytest

from helpers import GENERATED_CHOICES, fenced
from wizard.domain import Choice
from wizard.errors import ExtractionError, MalformedOutput, UnexpectedShape
from wizard.extract import extract_choice_step, extract_choices, extract_json


class TestExtractJson:
    def test_prefers_fenced_json_block(self):
        raw = 'はい、こちらです。\n```json\n{"a": 1}\n```\n以上です。'
        assert extract_json(raw) == {"a": 1}

    def test_first_fenced_block_wins(self):
        raw = '```json\n[1]\n```\nもう一つ:\n```json\n[2]\n```'
        assert extract_json(raw) == [1]

    def test_falls_back_to_trimmed_raw_text(self):
        assert extract_json('  \n {"ok": true} \n') == {"ok": True}

    def test_fence_tag_is_case_insensitive(self):
        assert extract_json("```JSON\n[1, 2]\n```") == [1, 2]

    def test_untagged_fence_is_not_unwrapped(self):
        with pytest.raises(MalformedOutput):
            extract_json("```\n[1, 2]\n```")

    def test_malformed_output_carries_raw_text(self):
        raw = "申し訳ありませんが、選択肢を生成できませんでした。"
        with pytest.raises(MalformedOutput) as exc:
            extract_json(raw)
        assert exc.value.raw == raw
        assert isinstance(exc.value, ExtractionError)


class TestExtractChoices:
    def test_fenced_choices_come_back_equal(self):
        choices = extract_choices(fenced(GENERATED_CHOICES))
        assert [c.model_dump() for c in choices] == GENERATED_CHOICES

    def test_bare_array(self):
        choices = extract_choices('[{"text": "a", "icon": "1"}, {"text": "b", "icon": "2"},'
                                  ' {"text": "c", "icon": "3"}, {"text": "d", "icon": "4"}]')
        assert [c.text for c in choices] == ["a", "b", "c", "d"]
        assert all(isinstance(c, Choice) for c in choices)

    def test_numbers_are_unexpected_shape(self):
        raw = "```json\n[1,2]\n```"
        with pytest.raises(UnexpectedShape) as exc:
            extract_choices(raw)
        assert exc.value.raw == raw

    @pytest.mark.parametrize("count", [3, 5])
    def test_wrong_count_is_unexpected_shape(self, count):
        items = [{"text": f"選択肢{i}", "icon": "⭐"} for i in range(count)]
        with pytest.raises(UnexpectedShape):
            extract_choices(fenced(items))

    def test_empty_text_is_unexpected_shape(self):
        items = [dict(c) for c in GENERATED_CHOICES]
        items[2]["text"] = ""
        with pytest.raises(UnexpectedShape):
            extract_choices(fenced(items))

    def test_object_instead_of_array_is_unexpected_shape(self):
        with pytest.raises(UnexpectedShape):
            extract_choices(fenced({"choices": GENERATED_CHOICES}))

    def test_missing_icon_is_unexpected_shape(self):
        items = [{"text": t} for t in ("a", "b", "c", "d")]
        with pytest.raises(UnexpectedShape):
            extract_choices(fenced(items))

    def test_non_string_icon_is_unexpected_shape(self):
        items = [dict(c) for c in GENERATED_CHOICES]
        items[0]["icon"] = 7
        with pytest.raises(UnexpectedShape):
            extract_choices(fenced(items))


class TestExtractChoiceStep:
    def test_array_form_uses_default_question(self):
        proposal = extract_choice_step(fenced(GENERATED_CHOICES), default_question="もう少し詳しく")
        assert proposal.next_question == "もう少し詳しく"
        assert proposal.needs_postal_code is False
        assert len(proposal.choices) == 4

    def test_object_form(self):
        payload = {"nextQuestion": "どんなお店ですか？", "needsPostalCode": True, "choices": GENERATED_CHOICES}
        proposal = extract_choice_step(fenced(payload), default_question="unused")
        assert proposal.next_question == "どんなお店ですか？"
        assert proposal.needs_postal_code is True
        assert proposal.choices[0].text == GENERATED_CHOICES[0]["text"]

    def test_needs_postal_code_defaults_to_false(self):
        payload = {"nextQuestion": "どれにしますか？", "choices": GENERATED_CHOICES}
        assert extract_choice_step(fenced(payload), default_question="x").needs_postal_code is False

    def test_object_missing_question_is_unexpected_shape(self):
        with pytest.raises(UnexpectedShape):
            extract_choice_step(fenced({"choices": GENERATED_CHOICES}), default_question="x")

    def test_object_with_three_choices_is_unexpected_shape(self):
        payload = {"nextQuestion": "q", "needsPostalCode": False, "choices": GENERATED_CHOICES[:3]}
        with pytest.raises(UnexpectedShape):
            extract_choice_step(fenced(payload), default_question="x")

    @pytest.mark.parametrize("flag", ["yes", 1, "true", None])
    def test_non_boolean_needs_postal_code_is_unexpected_shape(self, flag):
        payload = {"nextQuestion": "q", "needsPostalCode": flag, "choices": GENERATED_CHOICES}
        with pytest.raises(UnexpectedShape):
            extract_choice_step(fenced(payload), default_question="x")

    def test_choice_missing_icon_in_object_form_is_unexpected_shape(self):
        payload = {"nextQuestion": "q", "choices": [{"text": c["text"]} for c in GENERATED_CHOICES]}
        with pytest.raises(UnexpectedShape):
            extract_choice_step(fenced(payload), default_question="x")

    def test_scalar_is_unexpected_shape(self):
        with pytest.raises(UnexpectedShape):
            extract_choice_step("42", default_question="x")

from omanx.llm.prompts.policies import (
    KNOWLEDGE_HEADER,
    KNOWLEDGE_NOT_LOADED,
    SYSTEM_POLICY_LOCAL,
    SYSTEM_POLICY_SCHOLAR,
    build_system_prompt,
)
from omanx.routing.lane_classifier import Lane


def test_scholar_prompt_embeds_mode_and_knowledge():
    prompt = build_system_prompt(Lane.SCHOLAR, "community", "## opt\nWork after study")

    assert prompt.startswith(SYSTEM_POLICY_SCHOLAR.strip())
    assert "\n\nMODE: community\n" in prompt
    assert prompt.endswith(f"\n{KNOWLEDGE_HEADER}\n## opt\nWork after study\n")
    assert KNOWLEDGE_NOT_LOADED not in prompt


def test_scholar_prompt_marks_missing_knowledge():
    prompt = build_system_prompt(Lane.SCHOLAR, "official")

    assert prompt.endswith(f"MODE: official\n\n{KNOWLEDGE_NOT_LOADED}\n")
    assert KNOWLEDGE_HEADER not in prompt


def test_local_prompt_ignores_mode_and_knowledge():
    prompt = build_system_prompt("local", "official", "## secret corpus")

    assert prompt == SYSTEM_POLICY_LOCAL.strip()
    assert "MODE" not in prompt
    assert "secret corpus" not in prompt


def test_scholar_policy_requires_answer_format():
    for heading in ("Summary", "Steps", "References", "Escalation"):
        assert heading in SYSTEM_POLICY_SCHOLAR

"""
src/orchestrator/prompts.py

Assistant instructions, system prompts and per-tool prompt templates.
"""


import json
from typing import Any, Dict, List


ASSISTANT_NAME_TEMPLATE = "{name}'s Personal Assistant"

ASSISTANT_INSTRUCTIONS = (
    "You are an assistant embedded in a long-term coaching system. "
    "You MUST respond by calling exactly one of the provided tools via tool_calls. "
    "You are NOT allowed to respond in plain text or to simulate a function. "
    "Tool arguments must be a raw JSON object matching the tool schema, with no markdown "
    "or code block fences.\n"
    "1. generate_daily_insights: the user gives their focus, blocker and bold move for the day.\n"
    "2. analyze_decision: the user shares a dilemma or hard choice they are facing.\n"
    "3. assess_progress_and_suggest: the user asks for an assessment of their progress.\n"
    "If you do not recognise the input, return an empty tool_calls array. "
    "You will be tracking decisions and clarity sessions to help users improve over time."
)

# Prepended to every user message added to a thread
MESSAGE_PREFIX = "Please reply in raw JSON format. Do NOT include any markdown or code block fences.\n\n"

SYSTEM_PROMPTS: Dict[str, str] = {
    "generate_daily_insights": "You are a high-performance productivity assistant.",
    "analyze_decision": (
        "You are a senior decision strategist. "
        "You give clear, confident, and structured decisions."
    ),
    "assess_progress_and_suggest": "You are a progress analyst and productivity coach.",
}


def daily_insights_prompt(focus: str, blocker: str, bold_move: str) -> str:

    return (
        "Based on the following:\n\n"
        f"Focus: {focus}\n"
        f"Blocker: {blocker}\n"
        f"Bold Move: {bold_move}\n\n"
        "Please provide concise and direct insights the user can take action on today.\n\n"
        "Respond ONLY in raw JSON:\n"
        '{\n  "insights": [\n    "Insight 1",\n    "Insight 2",\n    "Insight 3"\n  ]\n}\n\n'
        "No markdown, no bullet points, no explanation. Just return a valid JSON object."
    )

def decision_prompt(dilemma: str) -> str:

    return (
        "I need help making a decision:\n"
        f"{dilemma}\n\n"
        "Please analyze the dilemma in detail, consider pros and cons, and give me a clear "
        "recommendation with confidence level (high, medium, low).\n"
        "Respond ONLY in raw JSON without markdown or explanation. "
        "Do NOT include any markdown or code block fences.\n"
        "Return an object with: recommendation, reasoning (as an array), and confidence."
    )

def progress_prompt(
        events: List[Dict[str, Any]],
        decisions: List[Dict[str, Any]],
        priorities: List[Dict[str, Any]],
) -> str:
    """The three collections are embedded as compact JSON."""

    return (
        "Analyze the user's progress this month in JSON format.\n\n"
        f"Calendar Events: {json.dumps(events, ensure_ascii=False, default=str)}\n"
        f"Decisions Made: {json.dumps(decisions, ensure_ascii=False, default=str)}\n"
        f"Active Priorities: {json.dumps(priorities, ensure_ascii=False, default=str)}\n\n"
        "Respond ONLY in raw JSON and do NOT include any markdown or code block fences. "
        "Use the following structure:\n"
        "{\n"
        '  "assessment": "string",\n'
        '  "achievements": ["string", "string", "string"],\n'
        '  "improvements": ["string", "string"],\n'
        '  "recommendations": ["string", "string", "string"]\n'
        "}"
    )


PLANNER_SYSTEM = "You are an expert planner. Break the user's task into atomic subtasks."


def planner_user(task: str) -> str:
    return f'Task: "{task}". Break this task into clear, atomic subtasks.'


STRUCTURED_OUTPUT_RULES = """Return ONLY valid JSON matching exactly this schema:
{schema}

Rules:
- Output MUST be a single JSON value (no markdown, no code fences, no commentary).
- Do not add keys the schema does not describe.
"""


JSON_REPAIR_SYSTEM = "You are a strict JSON formatter. Return ONLY valid JSON."


def json_repair_user(text: str, schema: str) -> str:
    return (
        f"Fix and output ONLY JSON matching this schema:\n{schema}\n\n"
        f"Content to fix:\n{text}\nReturn ONLY JSON."
    )

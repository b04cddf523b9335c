def build_conversation_text(messages: list, max_turns: int = 15, max_chars: int = 6000) -> str:
    """
    Builds "User: ..." / "Coach: ..." text from session messages for the summarizer.
    Keeps the most recent turns and stops at max_chars to avoid token blowups.
    """
    if not messages:
        return ""

    # Filter valid messages
    valid_messages = [
        m for m in messages
        if isinstance(m, dict) and 'role' in m and 'content' in m
    ]

    recent = valid_messages[-max_turns:]

    blocks = []
    total_chars = 0

    for msg in recent:
        speaker = "User" if msg['role'] == 'user' else "Coach"
        block = f"{speaker}: {msg['content']}"
        if total_chars + len(block) > max_chars:
            break
        blocks.append(block)
        total_chars += len(block) + 2  # blank line separator

    return "\n\n".join(blocks)


def export_transcript(messages: list, coach_name: str = "Coach") -> str:
    """Markdown export of a conversation, one block per turn."""
    lines = []
    for msg in messages:
        speaker = "You" if msg.get('role') == 'user' else coach_name
        lines.append(f"**{speaker}:** {msg.get('content', '')}")
    return "\n\n".join(lines)

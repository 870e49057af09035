"""System prompts and message templates."""

from pathlib import Path

MARKDOWN_DIR = Path(__file__).parent / "markdown"


def load_prompt(prompt_name: str) -> str:
    """Load a prompt from the markdown directory."""
    prompt_path = MARKDOWN_DIR / f"{prompt_name}.md"
    if not prompt_path.exists():
        raise FileNotFoundError(f"Prompt not found: {prompt_path}")

    content = prompt_path.read_text(encoding="utf-8")
    # Skip YAML frontmatter if present
    if content.startswith("---"):
        parts = content.split("---", 2)
        if len(parts) >= 3:
            content = parts[2].strip()
    return content

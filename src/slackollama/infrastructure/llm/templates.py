"""Jinja2 template utilities for prompts."""

from jinja2 import Environment, PackageLoader, select_autoescape


def create_jinja_env() -> Environment:
    """Create Jinja2 environment for prompt templates.

    Creates a configured Jinja2 environment that loads templates from
    the slackollama.infrastructure.llm.templates package.

    Returns:
        Configured Jinja2 environment.
    """
    return Environment(
        loader=PackageLoader("slackollama.infrastructure.llm", "templates"),
        autoescape=select_autoescape(),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
    )


class JinjaPromptBuilder:
    """PromptBuilder implementation backed by Jinja2 templates."""

    def __init__(self, env: Environment | None = None) -> None:
        """Initialize the builder.

        Args:
            env: Jinja2 environment. Defaults to create_jinja_env().
        """
        self._env = env or create_jinja_env()
        self._grounded = self._env.get_template("grounded_prompt.j2")

    def build_grounded(self, content: str, reference_text: str) -> str:
        """Combine a question with the text of the message it replies to.

        Args:
            content: User's question.
            reference_text: Text of the referenced message.

        Returns:
            Prompt text.
        """
        return self._grounded.render(content=content, reference_text=reference_text)

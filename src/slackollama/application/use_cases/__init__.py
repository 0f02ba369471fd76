"""Use cases."""

from slackollama.application.use_cases.reply_to_mention import ReplyToMentionUseCase

__all__ = ["ReplyToMentionUseCase"]

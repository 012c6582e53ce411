"""Per-chat conversation history for the finance assistant."""
import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

from catatuang.utils.logger import get_logger, get_app_dir

logger = get_logger()

ChatId = Union[int, str]

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"


class ChatHistory:
    """Stores every assistant exchange of a chat as a JSON list of messages."""

    def __init__(self, history_dir: Optional[Path] = None):
        self.history_dir = history_dir or get_app_dir() / "history"
        self.history_dir.mkdir(parents=True, exist_ok=True)

    def recent(self, chat_id: ChatId, limit: int) -> List[Dict[str, str]]:
        """
        Most recent messages of a chat, oldest first.

        Args:
            chat_id: Chat identifier
            limit: Maximum number of messages

        Returns:
            List of {"role", "content"} dicts
        """
        if limit <= 0:
            return []
        messages = self._load(chat_id)[-limit:]
        return [{"role": m["role"], "content": m["content"]} for m in messages]

    def append_exchange(self, chat_id: ChatId, question: str, reply: str) -> None:
        """Store a question and the reply to it."""
        messages = self._load(chat_id)
        created_at = datetime.now().isoformat(timespec="seconds")
        messages.append({"role": USER_ROLE, "content": question, "created_at": created_at})
        messages.append({"role": ASSISTANT_ROLE, "content": reply, "created_at": created_at})
        self._save(chat_id, messages)

    def clear(self, chat_id: ChatId) -> None:
        history_file = self._history_file(chat_id)
        if history_file.exists():
            history_file.unlink()
            logger.info(f"Cleared assistant history for chat {chat_id}")

    def _history_file(self, chat_id: ChatId) -> Path:
        return self.history_dir / f"{chat_id}.json"

    def _load(self, chat_id: ChatId) -> List[Dict[str, str]]:
        history_file = self._history_file(chat_id)

        if not history_file.exists():
            return []

        try:
            with open(history_file, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load assistant history for {chat_id}: {e}")
            return []

    def _save(self, chat_id: ChatId, messages: List[Dict[str, str]]) -> None:
        try:
            with open(self._history_file(chat_id), "w", encoding="utf-8") as f:
                json.dump(messages, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"Failed to save assistant history for {chat_id}: {e}")

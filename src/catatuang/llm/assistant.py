"""Finance assistant: answers money and bot-usage questions with chat memory."""
from typing import List, Optional, Union

from langchain.chat_models import init_chat_model
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from .chat_history import ASSISTANT_ROLE, ChatHistory
from catatuang.config.settings import AppSettings
from catatuang.utils import get_logger, retry_with_backoff, RetryableLLMError, ValidationError

logger = get_logger()

NO_REPLY = "(tidak ada balasan)"

SYSTEM_PROMPT = """Kamu adalah asisten yang kompeten dan ramah. Jawab dengan bahasa yang dipakai pengguna (utamakan Bahasa Indonesia jika tidak yakin).

Fokus utamamu adalah membantu pengguna dalam hal keuangan: pencatatan transaksi, manajemen anggaran, dan pengelolaan uang pribadi.

Kamu juga tahu cara memakai bot ini dan bisa memandu pengguna:
- Bot ini mencatat pengeluaran dan pemasukan harian ke Google Spreadsheet milik pengguna.
- Mencatat pengeluaran: /keluar makan nasi padang 25rb
- Mencatat pemasukan: /masuk gaji bulanan 5jt
- Beberapa transaksi sekaligus dipisah koma, "dan", atau baris baru: /keluar makan 20rb, parkir 5rb
- Nominal boleh ditulis 20rb, 20 ribu, 20k, 1,5jt, 1jt 500rb, atau 13.000
- Lihat rekap bulanan: /rekap
- Tanya asisten: /ai <pertanyaan>

Jika ada data yang salah (kategori, nominal, keterangan), pengguna bisa mengubahnya langsung di spreadsheet.

Jawab sejelas mungkin dan bantu pengguna semaksimal mungkin."""


class FinanceAssistant:
    """Chat model front end for free-form questions, one history per chat."""

    def __init__(
        self,
        settings: AppSettings,
        api_key: Optional[str] = None,
        history: Optional[ChatHistory] = None,
        model: Optional[BaseChatModel] = None
    ):
        """
        Initialize the assistant.

        Args:
            settings: Application settings (provider, model, retry policy, history size)
            api_key: API key for the model provider
            history: Conversation store (defaults to the app dir)
            model: Pre-built chat model, skips init_chat_model
        """
        if model is None:
            model_kwargs = {"api_key": api_key} if api_key else {}
            model = init_chat_model(
                model=settings.llm_model_name,
                model_provider=settings.llm_provider,
                temperature=settings.assistant_temperature,
                max_tokens=settings.llm_max_tokens,
                **model_kwargs
            )
        self.model: BaseChatModel = model
        self.history = history or ChatHistory()
        self.history_limit = settings.assistant_history_limit
        self._invoke = retry_with_backoff(
            max_retries=settings.llm_max_retries,
            initial_delay=settings.llm_initial_delay_seconds,
            backoff_factor=settings.llm_backoff_factor,
            retryable_exceptions=(RetryableLLMError,)
        )(self._invoke_model)

    def ask(self, chat_id: Union[int, str], question: str) -> str:
        """
        Answer a question and remember the exchange.

        Args:
            chat_id: Chat identifier
            question: Text after the /ai command

        Returns:
            The model's reply

        Raises:
            ValidationError: If the question is empty
            RetryableLLMError: If the model call keeps failing
        """
        question = (question or "").strip()
        if not question:
            raise ValidationError("Pertanyaan tidak boleh kosong")

        messages = self._build_messages(chat_id, question)
        reply = self._invoke(messages).strip() or NO_REPLY

        self.history.append_exchange(chat_id, question, reply)
        logger.info(f"Assistant answered with {len(messages) - 2} history messages")
        return reply

    def _build_messages(self, chat_id: Union[int, str], question: str) -> List[BaseMessage]:
        messages: List[BaseMessage] = [SystemMessage(content=SYSTEM_PROMPT)]
        for entry in self.history.recent(chat_id, self.history_limit):
            if entry["role"] == ASSISTANT_ROLE:
                messages.append(AIMessage(content=entry["content"]))
            else:
                messages.append(HumanMessage(content=entry["content"]))
        messages.append(HumanMessage(content=question))
        return messages

    def _invoke_model(self, messages: List[BaseMessage]) -> str:
        try:
            response = self.model.invoke(messages)
        except Exception as e:
            logger.error(f"Assistant call failed: {e}")
            raise RetryableLLMError(f"Gagal memproses permintaan AI: {e}")

        content = response.content
        if isinstance(content, list):
            content = "".join(
                block.get("text", "") if isinstance(block, dict) else str(block)
                for block in content
            )
        return content or ""

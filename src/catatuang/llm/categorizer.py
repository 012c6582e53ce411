"""LLM-based transaction classification."""
import json
import re
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from langchain.chat_models import init_chat_model
from langchain_core.language_models.chat_models import BaseChatModel
from pydantic import BaseModel, Field, ValidationError

from .categories import DEFAULT_CATEGORY, category_names, load_categories
from .models import Transaction, TransactionType
from .vendor_cache import VendorCache
from catatuang.config.settings import AppSettings
from catatuang.parsing import extract_amount
from catatuang.utils import get_logger, retry_with_backoff, LLMError, RetryableLLMError

logger = get_logger()

DATE_FORMATS = ["%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%d/%m/%y"]


class TransactionSchema(BaseModel):
    """Pydantic schema for the classification answer."""
    category: str = Field(description="One of the allowed categories")
    description: str = Field(description="Short description without the amount")
    amount: float = Field(ge=0, description="Amount in Rupiah, copied from the text")
    date: Optional[str] = Field(default=None, description="Transaction date in YYYY-MM-DD format")


class LLMCategorizer:
    """Classifies a normalized transaction candidate with a chat model."""

    def __init__(
        self,
        settings: AppSettings,
        api_key: Optional[str] = None,
        categories_path: Optional[Path] = None,
        vendor_cache: Optional[VendorCache] = None,
        model: Optional[BaseChatModel] = None,
        today: Callable[[], date] = date.today
    ):
        """
        Initialize LLM categorizer.

        Args:
            settings: Application settings (provider, model, retry policy)
            api_key: API key for the model provider
            categories_path: Path to categories.json
            vendor_cache: Per-chat category memory
            model: Pre-built chat model, skips init_chat_model
            today: Source of the current date
        """
        if model is None:
            model_kwargs = {"api_key": api_key} if api_key else {}
            model = init_chat_model(
                model=settings.llm_model_name,
                model_provider=settings.llm_provider,
                temperature=settings.llm_temperature,
                max_tokens=settings.llm_max_tokens,
                **model_kwargs
            )
        self.model: BaseChatModel = model

        self.categories = load_categories(categories_path)
        self.vendor_cache = vendor_cache
        self.today = today
        self._invoke = retry_with_backoff(
            max_retries=settings.llm_max_retries,
            initial_delay=settings.llm_initial_delay_seconds,
            backoff_factor=settings.llm_backoff_factor,
            retryable_exceptions=(RetryableLLMError,)
        )(self._invoke_model)

        logger.info(f"LLM Categorizer initialized with {settings.llm_provider}:{settings.llm_model_name}")

    def classify(
        self,
        candidate_text: str,
        transaction_type: TransactionType,
        chat_id: Optional[Union[int, str]] = None
    ) -> Transaction:
        """
        Classify one normalized candidate.

        Args:
            candidate_text: Candidate with its amount already normalized
            transaction_type: Expense or income
            chat_id: Chat identifier for the category memory

        Returns:
            Transaction with category, description, amount and date

        Raises:
            LLMError: If the model answer is unusable
            RetryableLLMError: If the model call keeps failing
        """
        allowed = category_names(self.categories, transaction_type)
        prompt = self._build_prompt(candidate_text, transaction_type, allowed)

        response_text = self._invoke(prompt)
        data = self._parse_response(response_text)

        amount = self._reconcile_amount(candidate_text, data["amount"])
        if amount <= 0:
            raise LLMError(f"No amount found in '{candidate_text}'")

        description = data["description"].strip() or candidate_text
        category = self._assign_category(description, data["category"], allowed, chat_id)

        return Transaction(
            date=self._parse_date(data.get("date")),
            description=description,
            amount=amount,
            category=category,
            transaction_type=transaction_type,
            raw_text=candidate_text
        )

    def _invoke_model(self, prompt: str) -> str:
        try:
            response = self.model.invoke(prompt)
        except Exception as e:
            logger.error(f"LLM call failed: {e}")
            raise RetryableLLMError(f"Failed to classify transaction: {e}")

        content = response.content
        if isinstance(content, list):
            # Some providers return a list of content blocks
            content = "".join(
                block.get("text", "") if isinstance(block, dict) else str(block)
                for block in content
            )
        if not content:
            raise RetryableLLMError("LLM returned empty response")
        return content

    def _reconcile_amount(self, candidate_text: str, llm_amount: float) -> int:
        """Prefer the deterministically normalized amount over the model's."""
        extracted = extract_amount(candidate_text)
        model_amount = int(round(llm_amount))

        if extracted is None:
            return model_amount

        if model_amount != extracted:
            logger.warning(
                f"LLM amount {model_amount} differs from normalized amount {extracted} "
                f"for '{candidate_text}', using {extracted}"
            )
        return extracted

    def _assign_category(
        self,
        description: str,
        llm_category: str,
        allowed: List[str],
        chat_id: Optional[Union[int, str]]
    ) -> str:
        """Assign category using the chat's memory or the LLM suggestion."""
        if self.vendor_cache and chat_id is not None:
            cached_category = self.vendor_cache.lookup(chat_id, description)
            if cached_category in allowed:
                return cached_category

        if llm_category in allowed:
            if self.vendor_cache and chat_id is not None and llm_category != DEFAULT_CATEGORY:
                self.vendor_cache.add_mapping(chat_id, description, llm_category)
            return llm_category

        logger.warning(f"Invalid category '{llm_category}' for '{description}', using '{DEFAULT_CATEGORY}'")
        return DEFAULT_CATEGORY

    def _parse_date(self, date_str: Optional[str]) -> date:
        if date_str:
            for fmt in DATE_FORMATS:
                try:
                    return datetime.strptime(date_str.strip(), fmt).date()
                except ValueError:
                    continue
            logger.warning(f"Invalid date format: {date_str}, using today")
        return self.today()

    def _build_prompt(self, candidate_text: str, transaction_type: TransactionType, allowed: List[str]) -> str:
        """Build classification prompt."""
        return f"""Kamu adalah pencatat keuangan pribadi. Klasifikasikan satu transaksi {transaction_type.value} berikut.

Kategori yang boleh dipakai (tulis PERSIS seperti ini):
{json.dumps(allowed, ensure_ascii=False, indent=2)}

Aturan:
- Nominal di dalam teks SUDAH berupa angka bulat dalam Rupiah. Salin angka itu apa adanya ke "amount", jangan dikalikan atau diubah.
- "description": keterangan singkat tanpa nominal.
- "date": format YYYY-MM-DD. Hari ini {self.today().isoformat()}; pakai tanggal hari ini jika teks tidak menyebut tanggal.
- Jika tidak ada kategori yang cocok, pakai "{DEFAULT_CATEGORY}".

Transaksi:
{candidate_text}

Balas HANYA dengan objek JSON:
{{"category": "...", "description": "...", "amount": 0, "date": "YYYY-MM-DD"}}"""

    def _parse_response(self, response_text: str) -> Dict:
        """Parse LLM JSON response."""
        try:
            cleaned = response_text.strip()
            if cleaned.startswith("```"):
                # Remove markdown code blocks
                lines = cleaned.split("\n")
                cleaned = "\n".join(lines[1:-1]) if len(lines) > 2 else cleaned

            cleaned = cleaned.replace('“', '"').replace('”', '"')
            cleaned = re.sub(r',\s*([\]}])', r'\1', cleaned)

            # The model sometimes wraps the object in prose
            json_match = re.search(r'\{.*\}', cleaned, re.DOTALL)
            if json_match:
                cleaned = json_match.group(0)

            data = json.loads(cleaned)
            if isinstance(data, list) and data:
                data = data[0]

            return TransactionSchema(**data).model_dump()

        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse JSON response: {e}")
            logger.debug(f"Response text: {response_text[:500]}")
            raise LLMError(f"Invalid JSON response from LLM: {e}")
        except (ValidationError, TypeError) as e:
            logger.error(f"Response validation failed: {e}")
            raise LLMError(f"LLM response does not match expected schema: {e}")

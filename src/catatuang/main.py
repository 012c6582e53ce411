"""Command line entry point."""
import sys
import argparse
from typing import Optional

from catatuang.config import ConfigManager, get_settings
from catatuang.llm import (
    LLMCategorizer,
    RuleClassifier,
    FallbackClassifier,
    VendorCache,
    FinanceAssistant,
    TransactionType
)
from catatuang.orchestrator import TransactionRecorder
from catatuang.parsing import AmountNormalizer, split_transactions
from catatuang.sheets import SheetsWriter, extract_spreadsheet_id
from catatuang.utils import get_logger, CatatUangError, ProcessingRegistry, ValidationError
from catatuang.utils.logger import configure_logging

logger = get_logger()


def parse_command(message: str) -> None:
    """Show how a message is split and normalized, without any network call."""
    normalizer = AmountNormalizer()
    candidates = split_transactions(message)

    if not candidates:
        print("Tidak ada transaksi ditemukan.")
        return

    print(f"{'#':<3} {'Rule':<10} {'Amount':>12}  Normalized")
    print("-" * 60)
    for index, candidate in enumerate(candidates, start=1):
        normalized = normalizer.normalize(candidate)
        match = normalizer.find_amount(candidate)
        amount = normalizer.extract_amount(normalized)
        print(
            f"{index:<3} {match.rule if match else '-':<10} "
            f"{amount if amount is not None else '-':>12}  {normalized}"
        )


def setup_command(args, config_manager: Optional[ConfigManager] = None) -> None:
    """Store the spreadsheet link and credentials in config.json."""
    config_manager = config_manager or ConfigManager()
    # Environment values stay in the environment
    config = config_manager.load_config(apply_env=False)

    if args.sheet:
        if not extract_spreadsheet_id(args.sheet):
            raise ValidationError(f"Link spreadsheet tidak valid: {args.sheet}")
        config.spreadsheet_link = args.sheet
    if args.api_key:
        config.llm_api_key = args.api_key
    if args.service_account:
        config.service_account_path = args.service_account
    if args.oauth_client_secrets:
        config.oauth_client_secrets = args.oauth_client_secrets

    config_manager.save_config(config)
    print(f"Konfigurasi disimpan ke {config_manager.config_file}")

    is_valid, message = config_manager.validate_config(config, require_llm=False)
    if not is_valid:
        print(f"Catatan: {message}")


def _build_recorder(config, settings, use_llm: bool) -> TransactionRecorder:
    """Wire classifier, writer and registry from configuration."""
    vendor_cache = VendorCache(fuzzy_ratio=settings.vendor_cache_fuzzy_ratio)
    classifier = RuleClassifier(vendor_cache=vendor_cache)

    if use_llm:
        llm = LLMCategorizer(settings, api_key=config.llm_api_key, vendor_cache=vendor_cache)
        classifier = FallbackClassifier(llm, classifier)

    return TransactionRecorder(
        classifier=classifier,
        writer=SheetsWriter.from_config(settings, config),
        registry=ProcessingRegistry(ttl_seconds=settings.registry_ttl_seconds)
    )


def _load_and_validate_config(require_llm: bool, require_google: bool = True):
    """Load and validate configuration, exiting on invalid values."""
    config_manager = ConfigManager()
    config = config_manager.load_config()

    is_valid, message = config_manager.validate_config(
        config, require_llm=require_llm, require_google=require_google
    )
    if not is_valid:
        logger.critical(f"Invalid configuration: {message}")
        sys.exit(1)

    return config


def _resolve_spreadsheet(link: str, config) -> str:
    spreadsheet_id = extract_spreadsheet_id(link or config.spreadsheet_link)
    if not spreadsheet_id:
        logger.critical("No spreadsheet configured. Use --sheet, SPREADSHEET_LINK or 'catatuang setup'")
        sys.exit(1)
    return spreadsheet_id


def record_command(args, settings) -> None:
    """Record one message into the spreadsheet."""
    config = _load_and_validate_config(require_llm=not args.no_llm)
    spreadsheet_id = _resolve_spreadsheet(args.sheet, config)
    recorder = _build_recorder(config, settings, use_llm=not args.no_llm)

    result = recorder.record(
        " ".join(args.message),
        TransactionType.from_command(args.type),
        spreadsheet_id,
        chat_id=args.chat
    )

    for txn in result.recorded:
        print(f"✓ {txn.date:%d/%m/%Y}  {txn.category:<20} {txn.description:<30} {txn.amount:>12,}")
    for failed in result.failed:
        print(f"✗ {failed.text}: {failed.reason}")
    print(f"\nTotal: {result.total_amount:,}")

    if result.all_failed:
        sys.exit(1)


def recap_command(args, settings) -> None:
    """Print monthly totals per category."""
    config = _load_and_validate_config(require_llm=False)
    spreadsheet_id = _resolve_spreadsheet(args.sheet, config)
    recorder = TransactionRecorder(
        classifier=None,
        writer=SheetsWriter.from_config(settings, config)
    )

    recap = recorder.recap(
        spreadsheet_id,
        TransactionType.from_command(args.type),
        month=args.month,
        year=args.year,
        chat_id=args.chat
    )

    print(f"\nRekap {args.type} {recap.month:02d}/{recap.year}")
    print("-" * 40)
    for category, amount in sorted(recap.totals.items(), key=lambda item: -item[1]):
        print(f"{category:<25} {amount:>12,}")
    print("-" * 40)
    print(f"{'Total':<25} {recap.total:>12,}")


def ask_command(args, settings, assistant: Optional[FinanceAssistant] = None) -> None:
    """Answer a free-form question with the finance assistant."""
    if assistant is None:
        config = _load_and_validate_config(require_llm=True, require_google=False)
        assistant = FinanceAssistant(settings, api_key=config.llm_api_key)

    if args.reset:
        assistant.history.clear(args.chat)
        if not args.message:
            return

    print(assistant.ask(args.chat, " ".join(args.message)))


def main():
    """Main entry point for the CatatUang CLI."""
    parser = argparse.ArgumentParser(description="CatatUang transaction recorder")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_parser = subparsers.add_parser("parse", help="Split and normalize a message (offline)")
    parse_parser.add_argument("message", nargs="+")

    record_parser = subparsers.add_parser("catat", help="Record a message into the spreadsheet")
    record_parser.add_argument("message", nargs="+")
    record_parser.add_argument("--type", choices=["keluar", "masuk"], default="keluar")
    record_parser.add_argument("--sheet", help="Spreadsheet link or ID")
    record_parser.add_argument("--chat", help="Chat ID (for category memory and logs)")
    record_parser.add_argument("--no-llm", action="store_true", help="Use keyword rules only")

    recap_parser = subparsers.add_parser("rekap", help="Monthly totals per category")
    recap_parser.add_argument("--type", choices=["keluar", "masuk"], default="keluar")
    recap_parser.add_argument("--month", type=int)
    recap_parser.add_argument("--year", type=int)
    recap_parser.add_argument("--sheet", help="Spreadsheet link or ID")
    recap_parser.add_argument("--chat", help="Chat ID")

    ask_parser = subparsers.add_parser("tanya", help="Ask the finance assistant")
    ask_parser.add_argument("message", nargs="*")
    ask_parser.add_argument("--chat", default="cli", help="Chat ID (conversation history)")
    ask_parser.add_argument("--reset", action="store_true", help="Forget the conversation history first")

    setup_parser = subparsers.add_parser("setup", help="Save spreadsheet link and credentials")
    setup_parser.add_argument("--sheet", help="Spreadsheet link or ID")
    setup_parser.add_argument("--api-key", help="LLM provider API key")
    setup_parser.add_argument("--service-account", help="Path to service account JSON")
    setup_parser.add_argument("--oauth-client-secrets", help="Path to OAuth client secrets JSON")

    args = parser.parse_args()

    if args.command == "parse":
        parse_command(" ".join(args.message))
        return

    try:
        if args.command == "setup":
            setup_command(args)
            return

        settings = get_settings()
        configure_logging(settings.log_level, settings.log_max_file_size_mb, settings.log_backup_count)

        if args.command == "catat":
            record_command(args, settings)
        elif args.command == "rekap":
            recap_command(args, settings)
        elif args.command == "tanya":
            if not args.message and not args.reset:
                parser.error("tanya needs a question")
            ask_command(args, settings)
    except CatatUangError as e:
        logger.critical(f"{type(e).__name__}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

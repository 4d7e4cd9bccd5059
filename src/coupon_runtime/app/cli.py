from __future__ import annotations

import argparse
import json
import sys
from typing import Optional

from coupon_runtime.adapters.config.partner_rules_loader import load_partner_table
from coupon_runtime.adapters.memory.in_memory_repository import InMemoryCouponStore
from coupon_runtime.application.combination_service import CombinationService
from coupon_runtime.application.errors import CouponsNotFoundError, EmptySelectionError
from coupon_runtime.domain.combination.models import CombinationConfig
from coupon_runtime.observability.logging import configure_logging
from coupon_runtime.settings import get_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Coupon Runtime CLI")
    subparsers = parser.add_subparsers(dest="command")

    validate_parser = subparsers.add_parser("validate", help="Validate a coupon combination from a data file")
    validate_parser.add_argument("--data", required=True, dest="data_path", help="JSON file with coupons and stores")
    validate_parser.add_argument("--ids", nargs="*", dest="coupon_ids", help="Coupon IDs (default: all coupons)")
    validate_parser.add_argument("--store", dest="store_id")
    validate_parser.add_argument("--partner-rules", dest="partner_rules_path")

    partners_parser = subparsers.add_parser("check-partners", help="Validate a partner rules JSON file")
    partners_parser.add_argument("path")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "check-partners":
        try:
            table = load_partner_table(args.path)
        except (FileNotFoundError, ValueError) as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
        print(f"✓ {len(table)} partner rule(s) valid: {', '.join(sorted(table))}")
        return 0

    if args.command != "validate":
        parser.print_help()
        return 0

    settings = get_settings()
    store = InMemoryCouponStore.from_json_file(args.data_path)
    service = CombinationService(
        coupon_repo=store,
        store_repo=store,
        redemption_repo=store,
        partner_table=load_partner_table(args.partner_rules_path or settings.partner_rules_path),
        config=CombinationConfig(
            volume_warning_threshold=settings.volume_warning_threshold,
            recommendation_min_product_groups=settings.recommendation_min_product_groups,
        ),
    )
    coupon_ids = args.coupon_ids if args.coupon_ids else list(store.coupons)

    try:
        result = service.validate_selection(coupon_ids, args.store_id)
    except (EmptySelectionError, CouponsNotFoundError) as e:
        print(str(e), file=sys.stderr)
        return 2

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0 if result.valid else 1


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations

# Conflict codes
RULE_NON_COMBINABLE = "combination.non_combinable"
RULE_STORE_MISMATCH = "combination.store_mismatch"
RULE_WHOLE_PURCHASE_EXCLUSIVE = "combination.whole_purchase_exclusive"
RULE_PRODUCT_GROUP_DUPLICATE = "combination.product_group_duplicate"
RULE_SINGLE_ITEM_DUPLICATE = "combination.single_item_duplicate"
RULE_PARTNER_LIMIT = "combination.partner_limit"
RULE_MAX_PER_TRANSACTION = "combination.max_per_transaction"
RULE_INCOMPATIBLE_GROUP = "combination.incompatible_group"
RULE_CATEGORY_NOT_COMBINABLE = "combination.category_not_combinable"

# Warning codes
RULE_SINGLE_ITEM_VOLUME = "combination.single_item_volume"

# Recommendation codes
RULE_PARTNER_RECOMMENDATION = "combination.partner_recommendation"
RULE_HIGH_VALUE_COMBINATION = "combination.high_value_combination"

UNKNOWN_PRODUCT_GROUP_NAME = "unknown product group"

# Redemption history
RULE_ALREADY_REDEEMED = "redemption.already_redeemed"

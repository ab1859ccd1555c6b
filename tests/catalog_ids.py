"""Guids of the rows in fixtures/test_catalog.yaml."""

HARBOR_GRILL = "10000000-0000-4000-8000-000000000001"
NOODLE_HOUSE = "10000000-0000-4000-8000-000000000002"
CLOSED_CAFE = "10000000-0000-4000-8000-000000000003"

CHEESEBURGER = "20000000-0000-4000-8000-000000000011"
MAC_AND_CHEESE = "20000000-0000-4000-8000-000000000012"
CAESAR_SALAD = "20000000-0000-4000-8000-000000000013"
CHICKEN_SALAD = "20000000-0000-4000-8000-000000000014"
FRENCH_FRIES = "20000000-0000-4000-8000-000000000015"
SEASONAL_SOUP = "20000000-0000-4000-8000-000000000016"
LEMONADE = "20000000-0000-4000-8000-000000000017"
CHICKEN_RAMEN = "20000000-0000-4000-8000-000000000021"
DUMPLINGS = "20000000-0000-4000-8000-000000000022"

DONENESS_GROUP = "30000000-0000-4000-8000-000000000101"
ADDONS_GROUP = "30000000-0000-4000-8000-000000000102"

MEDIUM = "40000000-0000-4000-8000-000000001001"
WELL_DONE = "40000000-0000-4000-8000-000000001002"
BACON = "40000000-0000-4000-8000-000000001003"
AVOCADO = "40000000-0000-4000-8000-000000001004"
TRUFFLE_AIOLI = "40000000-0000-4000-8000-000000001005"

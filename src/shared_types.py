"""Shared enums and types for brewlog."""

from enum import StrEnum


class ProxyAction(StrEnum):
    LIST = "list"
    GET = "get"
    CREATE = "create"
    GET_USER_CONFIG = "getUserConfig"
    LIST_USER_COFFEES = "listUserCoffees"
    COPY_TO_COMMUNITY_STASH = "copyToCommunityStash"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


class BrewField(StrEnum):
    COFFEE = "Coffee"
    COFFEE_NAME = "Coffee Name"
    COFFEE_ORIGIN = "Coffee Origin"
    COFFEE_ROASTER = "Coffee Roaster"
    COFFEE_VARIETAL = "Coffee Varietal"
    COFFEE_PROCESS = "Coffee Process"
    # lookup columns from before the snapshot fields existed
    COFFEE_NAME_LOOKUP = "Name/Producer (from Coffee)"
    COFFEE_VARIETAL_LOOKUP = "Varietal (from Coffee)"
    BREW_DATE = "Brew Date"
    BREW_METHOD = "Brew Method"
    BREWER = "Brewer"
    GRINDER = "Grinder Used"
    GRIND_SIZE = "Grind Size"
    TOTAL_BREW_TIME = "Total Brew Time"
    DOSE = "Dose"
    DRINK_WEIGHT = "Drink Weight"
    RATIO = "Ratio"
    POURS = "Number of Pours"
    WATER_TEMPERATURE = "Water Temperature (°C)"
    ENJOYMENT = "Enjoyment Rating"
    NOTES = "Notes & Tasting"
    RECIPE = "Recipe"
    CREATED_BY = "Created By"


class CoffeeField(StrEnum):
    NAME = "Name/Producer"
    ROASTER = "Roaster"
    ORIGIN = "Origin"
    PROCESS = "Process"
    VARIETAL = "Varietal"
    ROAST_DATE = "Roast Date"
    OPENED = "Opened"
    KILLED = "Killed"

"""Closed enumerations shared by models, schemas and services."""

import enum


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class Plan(str, enum.Enum):
    FREE = "FREE"
    BASIC = "BASIC"
    PRO = "PRO"
    ENTERPRISE = "ENTERPRISE"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    CANCELED = "CANCELED"
    PAST_DUE = "PAST_DUE"
    UNPAID = "UNPAID"

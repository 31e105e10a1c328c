"""Centralized application constants — single source of truth for hardcoded values."""

# --- Session ---
COOKIE_NAME = "token"
SECONDS_PER_DAY = 86400

# --- Passwords ---
BCRYPT_ROUNDS = 12
BCRYPT_MAX_BYTES = 72

# --- Stripe ---
STRIPE_SIGNATURE_HEADER = "stripe-signature"
CHECKOUT_SUCCESS_PATH = "/app/dashboard?success=true"
CHECKOUT_CANCEL_PATH = "/app/billing?canceled=true"
PORTAL_RETURN_PATH = "/app/billing"

# --- Analytics ---
DAILY_WINDOW_DAYS = 30
MAX_DAILY_WINDOW_DAYS = 365
TOP_EVENTS_LIMIT = 10
MAX_TOP_EVENTS_LIMIT = 100
EVENTS_PAGE_LIMIT = 100
MAX_EVENTS_PAGE_LIMIT = 1000
SUMMARY_WEEK_DAYS = 7

# --- Pagination ---
USERS_PER_PAGE = 10
MAX_USERS_PER_PAGE = 100

# --- Seed data ---
SEED_EVENT_NAMES = (
    "llm_request",
    "api_call",
    "dashboard_view",
    "subscription_view",
    "profile_update",
)

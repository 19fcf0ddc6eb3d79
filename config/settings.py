import os

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "console")  # console | json

# --- Simulation defaults ---
INITIAL_CAPITAL = float(os.getenv("INITIAL_CAPITAL", "10000"))
DEFAULT_NUM_PATHS = int(os.getenv("DEFAULT_NUM_PATHS", "1500"))
MIN_NUM_PATHS = 1
MAX_NUM_PATHS = int(os.getenv("MAX_NUM_PATHS", "25000"))
MAX_TRADE_EVENTS = int(os.getenv("MAX_TRADE_EVENTS", "5000"))

# Path is "dead" once equity <= DEATH_DRAWDOWN_FRACTION * start (0.30 = -70%)
DEATH_DRAWDOWN_FRACTION = float(os.getenv("DEATH_DRAWDOWN_FRACTION", "0.30"))

# Paths whose full equity trace is kept for percentile bands
BAND_SAMPLE_SIZE = int(os.getenv("BAND_SAMPLE_SIZE", "2000"))
BAND_PERCENTILES = {"p05": 0.05, "p25": 0.25, "p50": 0.50, "p75": 0.75, "p95": 0.95}

# Parallel path simulation (1 = sequential)
SIMULATION_MAX_WORKERS = int(os.getenv("SIMULATION_MAX_WORKERS", "1"))
SIMULATION_PARALLEL_MIN_PATHS = int(os.getenv("SIMULATION_PARALLEL_MIN_PATHS", "2000"))

# --- Sizing reference ---
DISCIPLINED_KELLY_MULTIPLIER = 0.5
DISCIPLINED_RISK_CAP = float(os.getenv("DISCIPLINED_RISK_CAP", "0.02"))

# --- Stress test ---
STRESS_WIN_DELTA = float(os.getenv("STRESS_WIN_DELTA", "0.05"))
STRESS_WIN_FLOOR = float(os.getenv("STRESS_WIN_FLOOR", "0.01"))

# --- Horizon calibration (trades per volatility regime) ---
HORIZON_BASE_TRADES = {
    "LOW": 420,
    "MED": 260,
    "HIGH": 140,
    "EXTREME": 70,
}
HORIZON_REFERENCE_RISK = float(os.getenv("HORIZON_REFERENCE_RISK", "0.02"))
HORIZON_EXPONENT = float(os.getenv("HORIZON_EXPONENT", "0.42"))
HORIZON_MIN_ADJUSTMENT = 0.55
HORIZON_MAX_ADJUSTMENT = 1.5

# --- Background recompute ---
RECOMPUTE_MIN_SECONDS = float(os.getenv("RECOMPUTE_MIN_SECONDS", "120"))
RECOMPUTE_MAX_SECONDS = float(os.getenv("RECOMPUTE_MAX_SECONDS", "300"))
RECOMPUTE_JOIN_TIMEOUT = float(os.getenv("RECOMPUTE_JOIN_TIMEOUT", "5.0"))

# --- Survival score ---
SURVIVAL_NORMAL_STREAK = 6
SURVIVAL_OVERSIZE_RISK = 0.02

# --- FastAPI ---
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
MAX_ACTIVE_SCHEDULES = int(os.getenv("MAX_ACTIVE_SCHEDULES", "32"))

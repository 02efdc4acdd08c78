#!/usr/bin/env python3
"""Helper script to inspect the effective configuration and create a template .env file."""

from pathlib import Path
import sys

TEMPLATE = """# API Configuration
FIELDROUTE_API_PREFIX=/api
# FIELDROUTE_FRONTEND_ALLOWED_ORIGINS - JSON array or comma-separated list
# FIELDROUTE_FRONTEND_ALLOWED_ORIGINS=http://localhost:5173,http://127.0.0.1:5173

# Geocoding (Nominatim usage policy: identify the application, max 1 request/second)
FIELDROUTE_GEOCODER_BASE_URL=https://nominatim.openstreetmap.org
FIELDROUTE_GEOCODER_USER_AGENT=FieldServiceManagement/1.0 (ops@example.com)
FIELDROUTE_GEOCODER_COUNTRY=Brasil
FIELDROUTE_GEOCODER_REGION=Santa Catarina
FIELDROUTE_GEOCODER_DELAY_SECONDS=1.5

# Route optimization
FIELDROUTE_KMEANS_MAX_ITERATIONS=50
FIELDROUTE_TWO_OPT_MAX_PASSES=100
# FIELDROUTE_DEFAULT_RANDOM_SEED=42
"""


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Field Route Service configuration checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f".env file NOT found at: {env_file}")
        with open(env_file, "w", encoding="utf-8") as f:
            f.write(TEMPLATE)
        print(f"Created template .env file at: {env_file}")
        print("Set FIELDROUTE_GEOCODER_USER_AGENT to something that identifies your deployment.")
        print()
    else:
        print(f"Found .env file at: {env_file}")
        print()

    sys.path.insert(0, str(project_root / "src"))
    try:
        from fieldroute.config import settings
    except Exception as e:
        print(f"Error loading config: {e}")
        print("Check the FIELDROUTE_ variables in .env (e.g. the geocoder delay must be >= 1.1).")
        return

    print("Effective settings:")
    print("-" * 60)
    for name, value in settings.model_dump().items():
        print(f"{name} = {value}")
    print("-" * 60)


if __name__ == "__main__":
    main()

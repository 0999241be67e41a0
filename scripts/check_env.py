#!/usr/bin/env python3
"""
Check environment configuration

Reports which environment variables are set and whether yt-dlp can be
found. Secret values are never printed.

Usage:
    python3 scripts/check_env.py
"""

import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dotenv import load_dotenv
load_dotenv('.env.local')
load_dotenv()

from core.config import Config


def describe_service_key(key: str) -> str:
    """Describe the shape of a Supabase service key without revealing it"""
    if not key:
        return "missing"
    if key.startswith('"') or key.startswith("'"):
        return f"set ({len(key)} chars) but wrapped in quotes, remove them"
    if key.count('.') == 2:
        return f"set ({len(key)} chars, JWT format)"
    return f"set ({len(key)} chars, not a JWT, check the value)"


def main():
    status = Config.validate_environment()

    print("Required:")
    for name, present in status['required'].items():
        print(f"   {'✅' if present else '❌'} {name}")

    print("Optional:")
    for name, present in status['optional'].items():
        print(f"   {'✅' if present else '➖'} {name}")

    _, service_key = Config.get_supabase_credentials()
    print(f"Service key: {describe_service_key(service_key or '')}")
    print(f"yt-dlp: {'available' if Config.is_ytdlp_available() else 'NOT FOUND'}")
    print(f"Temp dir: {Config.get_temp_dir()}")

    if not status['all_required_present']:
        sys.exit(1)


if __name__ == '__main__':
    main()

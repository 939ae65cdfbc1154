#!/usr/bin/env python3
"""
FILE: main.py
DESCRIPTION:
  Command-line entrypoint.
  - Sends one Home Assistant announcement (defaults to the test image) using
    the broker settings from config.py, then disconnects.
  - Exit code 0 on success, 1 on any announce failure.
"""
import os
import sys
import re

# --- 0. FORCE COLOR ENVIRONMENT ---
os.environ["TERM"] = "xterm-256color"
os.environ["CLICOLOR_FORCE"] = "1"

import argparse
import builtins
from datetime import datetime
import importlib.util

# --- 1. GLOBAL LOGGING & COLOR SETUP ---
c_cyan    = "\033[1;36m"   # Bold Cyan (Topics / Sources)
c_magenta = "\033[1;35m"   # Bold Magenta (System Tags / DEBUG Header)
c_blue    = "\033[1;34m"   # Bold Blue (Banner)
c_green   = "\033[1;32m"   # Bold Green (DATA Header / INFO)
c_yellow  = "\033[1;33m"   # Bold Yellow (WARN Only)
c_red     = "\033[1;31m"   # Bold Red (ERROR)
c_white   = "\033[1;37m"   # Bold White (Values / Brackets / Colons)
c_dim     = "\033[37m"     # Standard White (Timestamp)
c_reset   = "\033[0m"

_original_print = builtins.print

TEST_IMAGE = "diun/testnotif:latest"
TEST_DIGEST = "sha256:216e3ae7de4ca8b553eb11ef7abda00651e79e537e85c46108284e5e91673e01"


def get_source_color(clean_text):
    clean = clean_text.lower()
    if "mqtt" in clean: return c_magenta
    if "startup" in clean: return c_magenta
    if "config" in clean: return c_magenta
    if "critical" in clean: return c_red
    return c_cyan


def timestamped_print(*args, **kwargs):
    now = datetime.now().strftime("%H:%M:%S")
    time_prefix = f"{c_dim}[{now}]{c_reset}"
    msg = " ".join(map(str, args))
    lower_msg = msg.lower()

    header = f"{c_green}INFO{c_reset}{c_white}:{c_reset}"
    special_formatting_applied = False

    if any(x in lower_msg for x in ["error", "critical", "failed"]):
        header = f"{c_red}ERROR{c_reset}{c_white}:{c_reset}"
        msg = msg.replace("CRITICAL:", "").replace("ERROR:", "").strip()
    elif "warning" in lower_msg:
        header = f"{c_yellow}WARN{c_reset}{c_white}:{c_reset}"
        msg = msg.replace("WARNING:", "").strip()
    elif "debug" in lower_msg:
        header = f"{c_magenta}DEBUG{c_reset}{c_white}:{c_reset}"
        msg = msg.replace("[DEBUG]", "").replace("[debug]", "").strip()
    elif "-> tx" in lower_msg:
        header = f"{c_green}DATA{c_reset}{c_white}:{c_reset}"
        msg = msg.replace("-> TX", "").strip()
        match = re.match(r"^\[(.*?)\]:\s+(.*)", msg)
        if match:
            msg = f"{c_white}[{c_reset}{c_cyan}{match.group(1)}{c_reset}{c_white}]:{c_reset} {c_white}{match.group(2)}{c_reset}"
            special_formatting_applied = True

    if not special_formatting_applied:
        match = re.match(r"^\[(.*?)\]\s*(.*)", msg)
        if match:
            src_text = match.group(1)
            s_color = get_source_color(src_text)
            msg = f"{c_white}[{c_reset}{s_color}{src_text}{c_reset}{c_white}]:{c_reset} {match.group(2)}"

    _original_print(f"{time_prefix} {header} {msg}", flush=True, **kwargs)


def check_dependencies():
    if importlib.util.find_spec("paho") is None:
        print("CRITICAL: Python dependency 'paho-mqtt' not found.")
        sys.exit(1)


check_dependencies()

import config
from announcer import HomeAssistantAnnouncer
from errors import AnnounceError
from models import UpdateEvent


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Announce an image update to Home Assistant over MQTT discovery."
    )
    parser.add_argument("--image", default=TEST_IMAGE, help="image reference (default: %(default)s)")
    parser.add_argument("--digest", default=TEST_DIGEST, help="digest of the new image")
    parser.add_argument("--previous-digest", default="", help="digest currently installed (empty for first-seen images)")
    return parser.parse_args(argv)


def main(argv=None):
    builtins.print = timestamped_print
    args = parse_args(argv)

    event = UpdateEvent(
        image_reference=args.image,
        new_digest=args.digest,
        previous_digest=args.previous_digest,
    )
    announcer = HomeAssistantAnnouncer(config.BROKER)
    print(f"[STARTUP] Announcing {event.image_reference} via {config.BROKER.broker_url}")

    try:
        announcer.announce(event)
    except AnnounceError as e:
        print(f"[CRITICAL] Announce failed: {e}")
        return 1
    finally:
        try:
            announcer.close()
        except AnnounceError as e:
            print(f"[MQTT] WARNING: Could not mark node offline: {e}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

# Example: pyAlfen Usage Demo
# ---------------------------
# This script demonstrates how to read and control an Alfen charger using the pyAlfen library.
#
# Usage:
#   - Set your credentials below, or use a .env file with the following variables:
#       ALFEN_HOST, ALFEN_PASSWORD, ALFEN_TIMEOUT, ALFEN_CACHE_EXPIRE
#   - Run: python example.py

import os

import dotenv

import pyalfen

# Load environment variables from .env file if present
dotenv.load_dotenv()

# Enable debug logging for more verbose output (optional for learning)
# pyalfen.set_debug(True)

# Address and admin password of your charger, ALFEN_HOST / ALFEN_PASSWORD win if set
host = os.getenv("ALFEN_HOST", "10.0.1.123")
password = os.getenv("ALFEN_PASSWORD", "password")

config = pyalfen.AlfenConfig.from_env(host=host, password=password)

print(f"Connecting to Alfen charger at {config.uri}...")
with pyalfen.new_alfen(config) as charger:
    # --- Identity ---
    info = charger.info()
    print("Model: %s - Firmware: %s - Object ID: %s\n" % (info.model, info.firmware_version, info.object_id))

    # --- Readings (one request to the charger serves all of these) ---
    print("Status: %s" % charger.status().name)
    print("Enabled: %s" % charger.enabled())
    print("Max Current: %0.0fA - Phases: %d" % (charger.get_max_current(), charger.get_phases()))
    print("Power: %0.2fkW" % (charger.current_power() / 1000.0))
    print("Energy: %0.2fkWh" % charger.total_energy())
    print("Currents: %r" % (charger.currents(),))
    print("Voltages: %r" % (charger.voltages(),))

    # --- Control ---
    # charger.max_current(10)
    # charger.set_phases(1)

# Leaving the with block resets the charger to 3 phases / 16A and logs out

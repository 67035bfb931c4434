# pyAlfen Module - Command Line
# -*- coding: utf-8 -*-
"""
 Python module to interface with the local HTTP API of Alfen EV chargers

 Command Line:
    python -m pyalfen <get|set|diagnose|version>

 Connection settings are taken from -host/-password or from the
 ALFEN_* environment variables (a .env file is loaded if present).
"""

import argparse
import json
import sys

import dotenv

# Modules
from pyalfen import version, set_debug, Alfen, new_alfen, AlfenConfig, PyAlfenException

# Load environment variables from .env file if present
dotenv.load_dotenv()

# Setup parser and groups
p = argparse.ArgumentParser(prog="PyAlfen", description=f"PyAlfen Module v{version}")
subparsers = p.add_subparsers(dest="command", title='commands (run <command> -h to see usage information)',
                              required=True)

get_args = subparsers.add_parser("get", help='Get charger status and power levels')
get_args.add_argument("-format", type=str, default="text",
                      help="Output format: text, json, csv")

set_args = subparsers.add_parser("set", help='Set charger current, phases or enable state')
set_args.add_argument("-current", type=int, default=None,
                      help="Set the station current limit in A")
set_args.add_argument("-phases", type=int, default=None, choices=[1, 3],
                      help="Switch to 1 or 3 phase charging")
set_args.add_argument("-enable", action="store_true", default=False,
                      help="Enable charging (current limit to 16A)")
set_args.add_argument("-disable", action="store_true", default=False,
                      help="Disable charging (current limit to 5A)")

diagnose_args = subparsers.add_parser("diagnose", help='Print charger identity and boot information')

version_args = subparsers.add_parser("version", help='Print version information')

for sub in (get_args, set_args, diagnose_args):
    sub.add_argument("-host", type=str, default="", help="Hostname or IP address of the charger")
    sub.add_argument("-password", type=str, default="", help="Password of the admin user")

# Add a global debug flag
p.add_argument("-debug", action="store_true", default=False, help="Enable debug output")

if len(sys.argv) == 1:
    p.print_help(sys.stderr)
    sys.exit(1)

# parse args
args = p.parse_args()
command = args.command

# Set Debug Mode
if args.debug:
    set_debug(True)


def connect() -> Alfen:
    try:
        return new_alfen(AlfenConfig.from_env(host=args.host or None, password=args.password or None))
    except PyAlfenException as exc:
        print(f"ERROR: Unable to connect: {exc}")
        sys.exit(1)


# Get Charger Status
if command == 'get':
    charger = connect()
    if args.format == 'text':
        print(f"pyAlfen [{version}] - Get charger status and power levels from {charger.uri}\n")
    try:
        output = {
            'status': charger.status().name,
            'enabled': charger.enabled(),
            'max_current': charger.get_max_current(),
            'phases': charger.get_phases(),
            'power': charger.current_power(),
            'energy_kwh': charger.total_energy(),
            'currents': list(charger.currents()),
            'voltages': list(charger.voltages()),
        }
    except PyAlfenException as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)
    finally:
        charger.session.logout()
    if args.format == 'json':
        print(json.dumps(output, indent=2))
    elif args.format == 'csv':
        # create a csv header from keys
        header = ",".join(output.keys())
        print(header)
        values = ",".join(str(value) for value in output.values())
        print(values)
    else:
        # Table Output
        for item in output:
            name = item.replace("_", " ").title()
            print("  {:<18}{}".format(name, output[item]))
        print("")

# Set Charger Current, Phases or Enable State
elif command == 'set':
    # If no arguments, print usage
    if args.current is None and args.phases is None and not args.enable and not args.disable:
        print("usage: pyalfen set [-h] [-current CURRENT] [-phases {1,3}] [-enable] [-disable]")
        sys.exit(1)
    if args.enable and args.disable:
        print("ERROR: Use either -enable or -disable")
        sys.exit(1)
    charger = connect()
    print(f"pyAlfen [{version}] - Set charger settings on {charger.uri}\n")
    try:
        if args.phases is not None:
            print("Setting phases to %s" % args.phases)
            charger.set_phases(args.phases)
        if args.current is not None:
            print("Setting current limit to %sA" % args.current)
            charger.max_current(args.current)
        if args.enable or args.disable:
            print("%s charging" % ("Enabling" if args.enable else "Disabling"))
            charger.enable(args.enable)
    except PyAlfenException as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)
    finally:
        charger.session.logout()

# Diagnose Charger
elif command == 'diagnose':
    charger = connect()
    try:
        output = charger.diagnose()
    except PyAlfenException as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)
    finally:
        charger.session.logout()
    for item in output:
        name = item.replace("_", " ").title()
        print("  {:<18}{}".format(name, output[item]))
    print("")

# Print Version
elif command == 'version':
    print("pyAlfen [%s]" % version)
# Print Usage
else:
    p.print_help()

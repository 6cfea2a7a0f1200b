"""broadlink-lan command line front end."""

from __future__ import annotations

import argparse
import binascii
import getpass
import logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

import dotenv
from pydantic import ValidationError

from broadlink_lan.const import BROADLINK_VERSION
from broadlink_lan.correlation import correlation_context
from broadlink_lan.devices import commands
from broadlink_lan.devices.catalog import Capability, classify
from broadlink_lan.logging_abstraction import get_logger
from broadlink_lan.metrics import start_metrics_server
from broadlink_lan.protocol.exceptions import BroadlinkProtocolError
from broadlink_lan.structs import ClientEnv
from broadlink_lan.transport.auth import authenticate
from broadlink_lan.transport.discovery import WirelessSecurity, discover, join_network, probe
from broadlink_lan.transport.exceptions import UnsupportedCommandError
from broadlink_lan.transport.session import DeviceSession

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
LEARN_TIMEOUT = 30.0

SECURITY_CHOICES = {
    "none": WirelessSecurity.NONE,
    "wep": WirelessSecurity.WEP,
    "wpa1": WirelessSecurity.WPA1,
    "wpa2": WirelessSecurity.WPA2,
    "wpa": WirelessSecurity.WPA,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="broadlink-lan", description="Broadlink LAN device client")
    parser.add_argument("--version", action="version", version=f"%(prog)s {BROADLINK_VERSION}")
    parser.add_argument(
        "-l",
        "--local-ip",
        dest="local_ip",
        default=None,
        help="Local IP to bind; use when the device is on a different subnet",
    )
    parser.add_argument("-t", "--timeout", type=float, default=None, help="Discovery, reply or learning timeout in seconds")
    parser.add_argument("-D", "--debug", action="store_true", help="Enable debug mode")
    parser.add_argument("--env", help="Path to the environment file", default=None, type=Path)
    parser.add_argument("--metrics-port", type=int, default=None, help="Expose Prometheus metrics on this port")

    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List Broadlink devices on the network")
    p_list.set_defaults(handler=cmd_list)

    p_info = sub.add_parser("info", help="Show information about one device")
    p_info.add_argument("device_ip")
    p_info.set_defaults(handler=cmd_info)

    p_blast = sub.add_parser("blast", help="Send an IR/RF code given in hex")
    p_blast.add_argument("device_ip")
    p_blast.add_argument("code", help="Code in hex, e.g. 2600ac00...")
    p_blast.set_defaults(handler=cmd_blast)

    p_blast_file = sub.add_parser("blast-file", help="Send an IR/RF code stored in a file")
    p_blast_file.add_argument("device_ip")
    p_blast_file.add_argument("store_file", type=Path)
    p_blast_file.set_defaults(handler=cmd_blast_file)

    p_learn = sub.add_parser("learn", help="Learn a code from a remote")
    p_learn.add_argument("device_ip")
    p_learn.add_argument("code_type", choices=("ir", "rf"))
    p_learn.add_argument("-s", "--store-file", type=Path, default=None, help="File to write the learned code to")
    p_learn.set_defaults(handler=cmd_learn)

    p_connect = sub.add_parser("connect", help="Send Wi-Fi credentials to a device in AP mode")
    p_connect.add_argument("security_mode", choices=tuple(SECURITY_CHOICES))
    p_connect.add_argument("ssid")
    p_connect.add_argument("password", nargs="?", default=None)
    p_connect.add_argument("-p", "--prompt", action="store_true", help="Prompt for the password interactively")
    p_connect.set_defaults(handler=cmd_connect)

    return parser


def load_env_file(env_file: Path) -> None:
    env_path = env_file.expanduser().resolve()
    if not env_path.exists():
        logger.error("Environment file not found", extra={"path": str(env_path)})
        return
    if dotenv.load_dotenv(env_path, override=True):
        logger.info("Environment variables loaded", extra={"source": str(env_path)})
    else:
        logger.warning("No environment variables loaded from file", extra={"path": str(env_path)})


def _timeout(args: argparse.Namespace, default: float) -> float:
    return args.timeout if args.timeout is not None else default


def _open_session(args: argparse.Namespace, env: ClientEnv) -> DeviceSession:
    descriptor = probe(args.device_ip, _timeout(args, env.discovery_timeout), bind_address=env.bind_address)
    return authenticate(
        descriptor,
        env.auth_timeout,
        bind_address=env.bind_address,
        client_name=env.client_name,
        padding=env.cipher_padding,
    )


def _decode_hex(text: str) -> bytes:
    try:
        return bytes.fromhex("".join(text.split()))
    except ValueError as e:
        error_msg = f"Invalid hex code: {e}"
        raise ValueError(error_msg) from e


def cmd_list(args: argparse.Namespace, env: ClientEnv) -> int:
    print("Searching for devices...")
    found = 0
    for descriptor in discover(_timeout(args, env.discovery_timeout), bind_address=env.bind_address):
        if not found:
            print("Devices:")
        found += 1
        print(f"  {descriptor} ({classify(descriptor.device_type).model})")
    if not found:
        print("No devices found.")
    return EXIT_OK


def cmd_info(args: argparse.Namespace, env: ClientEnv) -> int:
    print(f"Getting information for device at {args.device_ip}")
    descriptor = probe(args.device_ip, _timeout(args, env.discovery_timeout), bind_address=env.bind_address)
    model = classify(descriptor.device_type)
    print(f"  {descriptor}")
    print(f"  model: {model.model} (family {model.family.value})")
    return EXIT_OK


def _blast(args: argparse.Namespace, env: ClientEnv, code: bytes) -> int:
    with _open_session(args, env) as session:
        print(f"Blasting IR/RF code: {binascii.hexlify(code).decode()}")
        commands.send_code(session, code, _timeout(args, env.reply_timeout))
    return EXIT_OK


def cmd_blast(args: argparse.Namespace, env: ClientEnv) -> int:
    return _blast(args, env, _decode_hex(args.code))


def cmd_blast_file(args: argparse.Namespace, env: ClientEnv) -> int:
    code = _decode_hex(args.store_file.read_text(encoding="utf-8"))
    return _blast(args, env, code)


def cmd_learn(args: argparse.Namespace, env: ClientEnv) -> int:
    print(f"Attempting to learn a code of type {args.code_type.upper()}...")
    with _open_session(args, env) as session:
        capability = Capability.RF if args.code_type == "rf" else Capability.IR
        if not classify(session.descriptor.device_type).supports(capability):
            raise UnsupportedCommandError(f"learn_{args.code_type}", session.descriptor.device_type)

        learn_timeout = _timeout(args, LEARN_TIMEOUT)
        if args.code_type == "rf":
            print("Hold the remote button until the carrier is found...")
            code = commands.learn_rf(
                session,
                learn_timeout,
                on_frequency_locked=lambda: print("Carrier found. Release, then press the button once."),
                reply_timeout=env.reply_timeout,
            )
        else:
            print("Point the remote at the device and press the button.")
            code = commands.learn_ir(session, learn_timeout, reply_timeout=env.reply_timeout)

    hex_string = binascii.hexlify(code).decode()
    print(f"Got code => {hex_string}")
    if args.store_file is not None:
        args.store_file.write_text(hex_string, encoding="utf-8")
    return EXIT_OK


def cmd_connect(args: argparse.Namespace, env: ClientEnv) -> int:
    security = SECURITY_CHOICES[args.security_mode]
    password = ""
    if security is not WirelessSecurity.NONE:
        if args.prompt:
            password = getpass.getpass("Wireless Password (will not show): ")
        elif args.password is None:
            error_msg = "This mode requires a password"
            raise ValueError(error_msg)
        else:
            password = args.password

    join_network(args.ssid, password, security, bind_address=env.bind_address)
    print(f"Sent connection message for SSID {args.ssid!r} ({security.name})")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the broadlink-lan CLI."""
    args = build_parser().parse_args(argv)

    if args.env:
        load_env_file(args.env)

    try:
        env = ClientEnv.from_environ()
    except ValidationError as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_USAGE

    if args.local_ip:
        env = env.model_copy(update={"bind_address": args.local_ip})
    if args.metrics_port is not None:
        env = env.model_copy(update={"metrics_port": args.metrics_port})

    if args.debug or env.debug:
        logger.set_level(logging.DEBUG)
        logger.debug("Debug logging enabled")

    if env.metrics_port:
        start_metrics_server(env.metrics_port)
        logger.info("Metrics exporter listening", extra={"port": env.metrics_port})

    handler: Callable[[argparse.Namespace, ClientEnv], int] = args.handler
    with correlation_context():
        try:
            return handler(args, env)
        except BroadlinkProtocolError as e:
            logger.error("%s failed: %s", args.command, e, extra={"error_type": type(e).__name__})
            return EXIT_FAILURE
        except (ValueError, OSError) as e:
            logger.error("%s: %s", args.command, e)
            return EXIT_USAGE
        except KeyboardInterrupt:
            logger.info("Interrupted")
            return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())

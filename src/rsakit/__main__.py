"""The Command Line Interface for the toolkit.

Binary payloads (ciphertexts, signatures) travel as base64 text. A message starting with `P:` is read from the
file named after the prefix.

Typical usage example:

    rsakit keygen -p key.pub -P key --keysize 2048
    rsakit sign -P key --message "Hi there!" --digest sha256
    OR
    python -m rsakit inspect -p key.pub
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import base64
import binascii
import logging
import pathlib
import sys
import typing

import rsakit
from rsakit import der


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    choices: list[str] | None = None
    default: typing.Any = None


help_dict: dict[str, HelpData] = {
    "keygen": HelpData("Key generation utility."),
    "encrypt": HelpData("Encryption utility."),
    "decrypt": HelpData("Decryption utility."),
    "sign": HelpData("Signing utility."),
    "verify": HelpData("Signature verification utility."),
    "inspect": HelpData("Key attribute and PEM display utility."),
    "convert": HelpData("Conversion between raw DER key files and PEM."),
    "public_key": HelpData(description="Location of the public key file.", format=pathlib.Path),
    "private_key": HelpData(description="Location of the private key file.", format=pathlib.Path),
    "message": HelpData(description="Message or path to file containing payload. If Path start with `P:`"),
    "encoding": HelpData(description="Payload encoding.", choices=["utf-8", "utf-16", "ascii"], default="utf-8"),
    "padding": HelpData(description="Encryption padding.", choices=[p.value for p in rsakit.Padding], default="pkcs1"),
    "keysize": HelpData(
        description="Key size (in bits).",
        choices=["512", "768", "1024", "2048", "3072", "4096"],
        default="2048",
    ),
    "digest": HelpData(
        description="Digest algorithm to sign with.",
        choices=[d.value for d in rsakit.DigestAlgorithm],
        default="sha256",
    ),
    "signature": HelpData(description="The base64 signature to validate against the payload and public key."),
    "source": HelpData(description="The key file to convert.", format=pathlib.Path),
    "destination": HelpData(description="The file to write the converted key to.", format=pathlib.Path),
    "key_class": HelpData(description="Whether the key is public or private.", choices=["public", "private"]),
    "to": HelpData(description="Target format.", choices=["pem", "der"], default="pem"),
}

needs = {
    "keygen": ("public_key", "private_key", "keysize"),
    "encrypt": ("public_key", "message", "padding", "encoding"),
    "decrypt": ("private_key", "message", "padding", "encoding"),
    "sign": ("private_key", "message", "digest", "encoding"),
    "verify": ("public_key", "message", "signature", "digest", "encoding"),
    "inspect": (),
    "convert": ("source", "destination", "key_class", "to"),
}


def _argument(parser: argparse.ArgumentParser, name: str, *flags: str, **kwargs: typing.Any) -> None:
    data = help_dict[name]
    if data.choices is not None:
        kwargs.setdefault("choices", data.choices)
    else:
        kwargs.setdefault("type", data.format)
    parser.add_argument(*flags, dest=name, help=data.description, **kwargs)


pubkey = argparse.ArgumentParser(add_help=False)
_argument(pubkey, "public_key", "--public_key", "-p")
privkey = argparse.ArgumentParser(add_help=False)
_argument(privkey, "private_key", "--private_key", "-P")
payloads = argparse.ArgumentParser(add_help=False)
_argument(payloads, "message", "--message", "-m")
_argument(payloads, "encoding", "--encoding", "-e")
paddings = argparse.ArgumentParser(add_help=False)
_argument(paddings, "padding", "--padding")
digests = argparse.ArgumentParser(add_help=False)
_argument(digests, "digest", "--digest", "-d")
corep = argparse.ArgumentParser(prog="rsakit")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {rsakit.__version__}")
corep.add_argument("--verbose", action="store_true", help="Log debug output to stderr")
commands = corep.add_subparsers(dest="subcommand", title="Subcommands", required=True)

keygen = commands.add_parser("keygen", parents=[privkey, pubkey], help=help_dict["keygen"].description)
_argument(keygen, "keysize", "--keysize")
keygen.add_argument("--overwrite", "-o", action="store_true", help="Overwrite destination files if they exist.")
commands.add_parser("encrypt", parents=[pubkey, payloads, paddings], help=help_dict["encrypt"].description)
commands.add_parser("decrypt", parents=[privkey, payloads, paddings], help=help_dict["decrypt"].description)
commands.add_parser("sign", parents=[privkey, payloads, digests], help=help_dict["sign"].description)
verify = commands.add_parser("verify", parents=[pubkey, payloads, digests], help=help_dict["verify"].description)
_argument(verify, "signature", "--signature", "-S")
commands.add_parser("inspect", parents=[pubkey, privkey], help=help_dict["inspect"].description)
convert = commands.add_parser("convert", help=help_dict["convert"].description)
_argument(convert, "source", "--source", "-i")
_argument(convert, "destination", "--destination", "-o")
_argument(convert, "key_class", "--key-class", "-k")
_argument(convert, "to", "--to")


def fill_defaults(args: argparse.Namespace) -> None:
    """Apply defaults for missing arguments, failing on those without one."""
    for reqs in needs[args.subcommand]:
        if getattr(args, reqs, None) is not None:
            continue
        default = help_dict[reqs].default
        if default is None:
            corep.error(f"argument {reqs} is required for {args.subcommand}")
        setattr(args, reqs, default)


def check_message(mess: str, enc: str) -> str:
    """Parse message for path-notice."""
    if mess.startswith("P:"):
        with open(mess[2:], "r", encoding=enc) as f:
            mess = f.read()
    return mess


def b64_arg(text: str) -> bytes:
    try:
        return base64.b64decode(text.strip(), validate=True)
    except binascii.Error as err:
        raise rsakit.DomainError.decode_failure(f"Invalid base64 argument: {err}") from err


def describe(key: rsakit.KeyHandle) -> str:
    attrs = key.attributes()
    return (f"class: {attrs.key_class.name if attrs.key_class else '?'}\n"
            f"type: {attrs.key_type or '?'}\n"
            f"size: {attrs.size_in_bits or '?'} bits\n"
            f"{key.pem()}")


def run(args: argparse.Namespace) -> int:
    """Execute one parsed subcommand. Returns the exit status."""
    match args.subcommand:
        case "keygen":
            if (args.private_key.exists() or args.public_key.exists()) and not args.overwrite:
                print("Destination private or public key already exists!", file=sys.stderr)
                return 1
            pair = rsakit.generate_key_pair(int(args.keysize))
            pair.private.export(args.private_key)
            pair.public.export(args.public_key)
            print("Key pair generated!")
        case "encrypt":
            pub = rsakit.KeyHandle.import_key(args.public_key, rsakit.KeyClass.PUBLIC)
            message = check_message(args.message, args.encoding).encode(args.encoding)
            print(base64.b64encode(rsakit.encrypt(message, pub, args.padding)).decode("ascii"))
        case "decrypt":
            priv = rsakit.KeyHandle.import_key(args.private_key, rsakit.KeyClass.PRIVATE)
            ciphertext = b64_arg(check_message(args.message, "ascii"))
            print(rsakit.decrypt(ciphertext, priv, args.padding).decode(args.encoding))
        case "sign":
            priv = rsakit.KeyHandle.import_key(args.private_key, rsakit.KeyClass.PRIVATE)
            message = check_message(args.message, args.encoding).encode(args.encoding)
            print(base64.b64encode(rsakit.sign(message, priv, args.digest)).decode("ascii"))
        case "verify":
            pub = rsakit.KeyHandle.import_key(args.public_key, rsakit.KeyClass.PUBLIC)
            message = check_message(args.message, args.encoding).encode(args.encoding)
            if not rsakit.verify(message, pub, args.digest, b64_arg(args.signature)):
                print("Signature Verification Failed!")
                return 1
            print("Signature Verified!")
        case "inspect":
            if args.public_key is None and args.private_key is None:
                corep.error("inspect needs --public_key or --private_key")
            if args.public_key is not None:
                print(describe(rsakit.KeyHandle.import_key(args.public_key, rsakit.KeyClass.PUBLIC)), end="")
            if args.private_key is not None:
                print(describe(rsakit.KeyHandle.import_key(args.private_key, rsakit.KeyClass.PRIVATE)), end="")
        case "convert":
            key_class = rsakit.KeyClass(args.key_class)
            if args.to == "pem":
                data = args.source.read_bytes()
                if key_class is rsakit.KeyClass.PUBLIC:
                    data = der.unwrap_public_key_if_present(data)
                key = rsakit.KeyHandle.import_bytes(data, key_class)
                key.export(args.destination)
            else:
                key = rsakit.KeyHandle.import_key(args.source, key_class)
                args.destination.write_bytes(key.raw_bytes())
            print(f"Wrote {args.destination}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Command line entry point."""
    args = corep.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    fill_defaults(args)
    try:
        return run(args)
    except rsakit.RSAError as err:
        print(err, file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())

"""The Command Line Interface for rsagen.

Generates a single RSA private key, in the manner of the classic ``genrsa`` tool. Any ``--<cipher>`` option naming
a supported cipher (for example ``--aes256``) encrypts the output; without one the key is written unencrypted.

Typical usage example:

    rsagen --verbose --out key.pem 3072
    OR
    python -m rsagen --aes256 --passout env:KEYPASS --primes 3 4096
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import logging
import sys
import typing

import rsagen
from rsagen import config
from rsagen import pbes
from rsagen.genrsa import GenRSA


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    default: typing.Any = None


help_dict: dict[str, HelpData] = {
    "numbits":
        HelpData(f"Size of key in bits, defaults to {config.DEFAULT_BITS}."),
    "3":
        HelpData("Use 3 for the E value."),
    "F4":
        HelpData("Use F4 (0x10001) for the E value."),
    "out":
        HelpData("Output the key to specified file. Defaults to standard output."),
    "passout":
        HelpData("Output file pass phrase source: pass:<secret>, env:<var>, file:<path>, fd:<n>, stdin or prompt."),
    "primes":
        HelpData("Specify number of primes.", str, str(config.DEFAULT_PRIMES)),
    "verbose":
        HelpData("Verbose output: show progress and the public exponent."),
}

CIPHER_HELP = (f"Encrypt the output with any supported cipher: --{', --'.join(pbes.CIPHERS)}. "
               "WITHOUT A CIPHER THE PRIVATE KEY IS WRITTEN UNENCRYPTED.")

corep = argparse.ArgumentParser(prog="rsagen",
                                usage="%(prog)s [options] [numbits]",
                                description="Generate an RSA private key.",
                                epilog=CIPHER_HELP,
                                allow_abbrev=False)
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {rsagen.__version__}")
corep.add_argument("numbits", nargs="?", type=help_dict["numbits"].format, help=help_dict["numbits"].description)
corep.add_argument("--3",
                   dest="exponent",
                   action="store_const",
                   const=config.RSA_3,
                   help=help_dict["3"].description)
corep.add_argument("--F4", "--f4", dest="exponent", action="store_const", const=config.RSA_F4,
                   help=help_dict["F4"].description)
corep.add_argument("--out", "-o", help=help_dict["out"].description)
corep.add_argument("--passout", help=help_dict["passout"].description)
corep.add_argument("--primes",
                   type=help_dict["primes"].format,
                   default=help_dict["primes"].default,
                   help=help_dict["primes"].description)
corep.add_argument("--verbose", action="store_true", help=help_dict["verbose"].description)
corep.set_defaults(exponent=config.RSA_F4)


class UsageError(Exception):
    pass


def split_extras(extras: list[str]) -> tuple[str | None, list[str]]:
    """Separates cipher selectors from the arguments argparse did not recognise.

    Args:
        extras: The leftover arguments.

    Returns:
        Tuple of (last selected cipher or None, extra positional arguments).

    Raises:
        UsageError: If an unknown option is present.
    """
    cipher = None
    positionals = []
    for arg in extras:
        if arg.startswith("-") and pbes.is_supported(arg):
            cipher = pbes.cipher_name(arg)
        elif arg.startswith("-"):
            raise UsageError(f"Unknown option: {arg}")
        else:
            positionals.append(arg)
    return cipher, positionals


def main(argv: list[str] | None = None) -> int:
    """Parses the command line and runs one key generation."""
    logging.basicConfig(stream=sys.stderr, level=config.LOG_LEVEL, format="%(name)s: %(levelname)s %(message)s")
    prog = corep.prog
    try:
        args, extras = corep.parse_known_args(argv)
    except SystemExit as exc:
        # --help and --version exit 0, malformed arguments exit non-zero after argparse printed its usage.
        if exc.code in (0, None):
            return 0
        print(f"{prog}: Use --help for summary.", file=sys.stderr)
        return 1
    try:
        cipher, positionals = split_extras(extras)
        if positionals:
            print("Extra arguments given.", file=sys.stderr)
            raise UsageError(" ".join(positionals))
    except UsageError as exc:
        logging.getLogger(__name__).debug("Rejected arguments: %s", exc)
        print(f"{prog}: Use --help for summary.", file=sys.stderr)
        return 1
    return GenRSA().run(args.numbits,
                        primes=args.primes,
                        exponent=args.exponent,
                        cipher=cipher,
                        passout=args.passout,
                        verbose=args.verbose,
                        out=args.out)


if __name__ == "__main__":
    sys.exit(main())

"""ducktype CLI - check that one class duck-types as another."""

from __future__ import annotations

import os
import sys

from .check import Checker, import_type
from .errors import UnknownContractType


USAGE: str = """\
ducktype [OPTIONS] CANDIDATE CONTRACT

Check that the CANDIDATE class structurally satisfies the CONTRACT class.
Both are importable class references: pkg.mod.Cls or pkg.mod:Outer.Inner

Options:
  --strict-any   A candidate parameter typed Any does not accept a specific
                 contract type
  --strict-returns
                 A union return type passes only if every member matches
  --quiet        Print nothing; report through the exit status only
  --help         Show this help message

Exit status: 0 conforms, 1 violations found, 2 usage or lookup error
"""


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    strict_any = False
    strict_returns = False
    quiet = False
    refs: list[str] = []
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--strict-any":
            strict_any = True
        elif arg == "--strict-returns":
            strict_returns = True
        elif arg == "--quiet" or arg == "-q":
            quiet = True
        elif arg.startswith("-"):
            print("ducktype: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        elif len(refs) < 2:
            refs.append(arg)
        else:
            print("ducktype: unexpected argument '" + arg + "'", file=sys.stderr)
            return 2
        i += 1
    if len(refs) < 2:
        print("ducktype: expected CANDIDATE and CONTRACT", file=sys.stderr)
        return 2

    # Console scripts do not put the working directory on sys.path.
    cwd = os.getcwd()
    if "" not in sys.path and cwd not in sys.path:
        sys.path.insert(0, cwd)
    try:
        candidate = import_type(refs[0])
    except UnknownContractType as e:
        print("ducktype: candidate " + str(e), file=sys.stderr)
        return 2
    checker = Checker(strict_any=strict_any, strict_returns=strict_returns)
    try:
        violations = checker.check_type(candidate, refs[1])
    except UnknownContractType as e:
        print("ducktype: contract " + str(e), file=sys.stderr)
        return 2

    if len(violations) == 0:
        if not quiet:
            print("ok: " + refs[0] + " conforms to " + refs[1])
        return 0
    if not quiet:
        for v in violations:
            print(v.kind + " " + v.member + ": " + v.detail)
    return 1


if __name__ == "__main__":
    sys.exit(main())

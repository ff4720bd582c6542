#!/usr/bin/env python3
"""
Check saved Progressive_Solver output: every listed root squares to a progressive
number, and the final line is the sum of those squares.

The progression is found by brute force over the divisor d, independent of the
(a, b, c) parameterization the solver uses.

    python3 Progressive_Solver.py > progressive_squares.txt
    python3 Progressive_Checker.py progressive_squares.txt
"""

import math
import sys

import sympy
from sympy.ntheory.primetest import is_square


def find_progression(n):
    """Return (d, q, r) with n = d*q + r, r < d <= q and r, d, q geometric, or None"""
    # d <= q forces d*d <= n
    for d in range(1, math.isqrt(n) + 1):
        q, r = divmod(n, d)
        if d * d == r * q:
            return d, q, r
    return None

def check_progressive_square(root):
    """Check that root**2 is a progressive perfect square"""
    n = root * root
    witness = find_progression(n)
    result = {
        'root': root,
        'n': n,
        'is_square': is_square(n),
        'witness': witness,
        'ratio': None,
        'factorization': sympy.factorint(n),
    }
    if witness is not None:
        d, q, r = witness
        result['ratio'] = sympy.Rational(d, r)
    result['is_valid'] = result['is_square'] and witness is not None
    return result

def parse_output(lines):
    """Split solver output into (roots, declared_sum, errors).

    declared_sum is None if missing; unparsable lines are reported in errors and skipped.
    """
    roots = []
    declared = None
    errors = []
    seen_blank = False
    for line_num, line in enumerate(lines, 1):
        line = line.strip()
        if not line:
            seen_blank = True
            continue
        try:
            value = int(line)
        except ValueError:
            errors.append(f"Line {line_num}: Error parsing {line!r}")
            print(f"Line {line_num}: Error parsing - {line}")
            if seen_blank:
                break
            continue
        if seen_blank:
            declared = value
            break
        roots.append(value)
    return roots, declared, errors

def check_file(filename):
    """Verify a solver output file; returns the list of error messages."""
    with open(filename, 'r') as f:
        roots, declared, errors = parse_output(f)

    if len(set(roots)) != len(roots):
        errors.append("duplicate roots listed")

    for root in roots:
        result = check_progressive_square(root)
        if not result['is_valid']:
            errors.append(f"root {root}: n = {result['n']} is not a progressive square")
            print(f"\n❌ FAILED root = {root}:")
            print(f"   n = {result['n']:,}")
            print(f"   is_square = {result['is_square']} witness = {result['witness']}")
        else:
            d, q, r = result['witness']
            print(f"root = {root} n = {result['n']:,} = {d}*{q} + {r} "
                  f"ratio {result['ratio']} factorization {result['factorization']}")

    total = sum(root * root for root in roots)
    if declared is None:
        errors.append("sum line missing")
    elif declared != total:
        errors.append(f"declared sum {declared} != computed sum {total}")
    else:
        print(f"\nsum = {total:,} ✓")
    return errors

def main():
    filename = sys.argv[1] if len(sys.argv) > 1 else 'progressive_squares.txt'

    print(f"Checking progressive squares in {filename}...")
    print("=" * 70)

    errors = check_file(filename)

    print("=" * 70)
    if errors:
        print(f"❌ {len(errors)} error(s):")
        for e in errors:
            print(f"   {e}")
        return 1
    print("✓ All listed squares are progressive and the sum matches.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
# Progressive_Solver.py version 1
"""
Progressive perfect-square enumerator by (a, b, c) reparameterization

Purpose
-------
A positive integer n, divided by d, leaves quotient q and remainder r.  When
d, q and r are consecutive terms of a geometric sequence (in some order) we
call n progressive.  For example 58 = 6·9 + 4 and 4, 6, 9 has ratio 3/2.
Some progressive numbers, such as 9 and 10404 = 102², are also perfect
squares.  This script finds every progressive perfect square below 10¹² and
prints their roots and their sum.

Mathematical framework
----------------------
Order the terms so that r < d ≤ q.  Then d = r·(a/b) and q = r·(a/b)² for a
ratio a/b > 1.  Both d and q are integers, so b² | r.  With c = r/b²:

    r = c·b²
    d = c·a·b
    q = c·a²
    n = d·q + r = c²·a³·b + c·b²

Every triple of positive integers with b < a yields a genuine (r, d, q), and
every progressive n arises from some triple.  Triples with gcd(a, b) > 1 repeat
values already produced by the reduced ratio; the solution set absorbs them.

Search bounds
-------------
n is strictly increasing in c, and for c = 1 it is strictly increasing in b.
The c loop stops at the first n ≥ BOUND, and the b loop stops as soon as
n(a, b, 1) ≥ BOUND.  Since n(a, 1, 1) = a³ + 1, only a < ceil(BOUND^(1/3)) can
contribute.

Square test
-----------
A square reduced mod 64 takes only 12 of the 64 possible residues.  The residue
bitmask rejects most candidates with one shift and mask; survivors are
confirmed with math.isqrt.

How to run
----------
    python3 Progressive_Solver.py                  # single process
    python3 Progressive_Solver.py --workers 8      # striped over a process pool
    python3 Progressive_Solver.py --version        # environment block, JSON

stdout carries the roots (ascending), a blank line and the sum of the squares.
Progress and audit lines go to stderr.
"""

from __future__ import annotations

import argparse
import hashlib
import json
import math
import os
import platform
import subprocess
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from multiprocessing import get_context
from typing import Dict, Iterable, Iterator, List, Optional, Set, TextIO, Tuple

import sympy


program_name, program_version = "Progressive_Solver", 1

# Exclusive upper limit on n.
BOUND = 10**12

# The modulus used for fast perfect square testing. Should be a power of two.
MODULUS = 64


# ----------------------------- switches (set by args) -----------------------------
DEBUG = False
ASSERTIONS = False


# ----------------------------- small utilities -----------------------------
def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()

def read_self_source(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()

def sha256_bytes(b: bytes) -> str:
    h = hashlib.sha256()
    h.update(b)
    return h.hexdigest()

def get_git_commit() -> Optional[str]:
    # Best effort: if this file is inside a git repo, return HEAD commit hash.
    try:
        r = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
        )
        s = (r.stdout or "").strip()
        return s if s else None
    except (OSError, subprocess.CalledProcessError):
        return None

def env_block(script_path: str, argv: List[str]) -> Dict[str, object]:
    src = read_self_source(script_path)
    return {
        "program": program_name,
        "program_version": program_version,
        "script_path": os.path.abspath(script_path),
        "script_sha256": sha256_bytes(src),
        "git_commit": get_git_commit(),
        "command_line": " ".join(argv),
        "python_version": sys.version.replace("\n", " "),
        "platform": platform.platform(),
        "sympy_version": sympy.__version__,
        "bound": BOUND,
        "modulus": MODULUS,
    }


# ----------------------------- square test -----------------------------
def quadratic_residues_mod(n: int) -> int:
    """Return a bitmask of the quadratic residues of the natural numbers mod n.

    Bit i is set iff some k has k² ≡ i (mod n).  Since k² mod n = (k mod n)² mod n,
    squaring 0..n-1 reaches every residue a square can take, so a number whose
    bit is unset cannot be a perfect square.
    """
    if n <= 0:
        raise ValueError(f"{n} is not a valid modulus")
    residues = 0
    for i in range(n):
        residues |= 1 << ((i * i) % n)
    return residues


QUADRATIC_RESIDUES = quadratic_residues_mod(MODULUS)


def passes_residue_filter(n: int) -> bool:
    return bool((QUADRATIC_RESIDUES >> (n % MODULUS)) & 1)

def is_perfect_square(n: int) -> bool:
    """Returns True if n is a perfect square."""
    if not passes_residue_filter(n):
        return False

    # Residue test inconclusive, fall back to the exact root.
    root = math.isqrt(n)
    return root * root == n


# ----------------------------- candidates -----------------------------
def compute_candidate(a: int, b: int, c: int) -> int:
    return c * c * a * a * a * b + c * b * b

def progression_terms(a: int, b: int, c: int) -> Tuple[int, int, int]:
    """Return (r, d, q) = (c·b², c·a·b, c·a²) for the triple (a, b, c)."""
    return c * b * b, c * a * b, c * a * a

def check_progression(a: int, b: int, c: int, n: int) -> None:
    r, d, q = progression_terms(a, b, c)
    assert r < d <= q, f"ordering broken a={a} b={b} c={c}: r={r} d={d} q={q}"
    assert d * d == r * q, f"not geometric a={a} b={b} c={c}: r={r} d={d} q={q}"
    assert n == d * q + r, f"n mismatch a={a} b={b} c={c}: n={n} d*q+r={d * q + r}"

def a_limit(bound: int) -> int:
    """Smallest a with a³ ≥ bound; every contributing a lies strictly below it."""
    root, exact = sympy.integer_nthroot(bound, 3)
    return int(root) if exact else int(root) + 1

def iter_candidates(bound: int, a_start: int = 1, a_end: Optional[int] = None,
                    step: int = 1) -> Iterator[Tuple[int, int, int, int]]:
    """Yield (a, b, c, n) for every candidate n < bound, a in range(a_start, a_end, step)."""
    if a_end is None:
        a_end = a_limit(bound)
    for a in range(a_start, a_end, step):
        a3 = a * a * a
        # r < d <= q implies a/b > 1, or equivalently b < a.
        for b in range(1, a):
            if a3 * b + b * b >= bound:
                break
            c = 1
            while True:
                n = compute_candidate(a, b, c)
                if n >= bound:
                    break
                yield a, b, c, n
                c += 1


# ----------------------------- work plumbing -----------------------------
# The a range is striped across tasks: task o takes a = a_start+o, a_start+o+step, ...
# The c loop runs ~sqrt(BOUND/(a³b)) times, so work per a falls off steeply.

@dataclass(frozen=True)
class SearchParams:
    bound: int
    a_start: int
    a_end: int
    step: int


@dataclass(frozen=True)
class ChunkTask:
    offset: int = 0


@dataclass
class ChunkResult:
    task: ChunkTask
    sols: List[int]
    candidates: int
    rejected_residue: int
    rejected_root: int
    accepted: int
    elapsed_sec: float
    # Debug-only: (a, b, c, n) for each square found
    hits: Optional[List[Tuple[int, int, int, int]]] = None


def _init_worker(debug: bool, assertions: bool) -> None:
    global DEBUG, ASSERTIONS
    DEBUG = debug
    ASSERTIONS = assertions


def worker_chunk(args: Tuple[ChunkTask, SearchParams]) -> ChunkResult:
    task, params = args

    t0 = time.time()
    out: Set[int] = set()
    candidates = 0
    rejected_residue = 0
    rejected_root = 0
    accepted = 0
    hits: Optional[List[Tuple[int, int, int, int]]] = [] if DEBUG else None

    cands = iter_candidates(params.bound, params.a_start + task.offset,
                            params.a_end, params.step)
    for a, b, c, n in cands:
        candidates += 1
        if ASSERTIONS:
            check_progression(a, b, c, n)
        if not passes_residue_filter(n):
            rejected_residue += 1
            continue
        root = math.isqrt(n)
        if root * root != n:
            rejected_root += 1
            continue
        accepted += 1
        out.add(n)
        if hits is not None:
            hits.append((a, b, c, n))

    return ChunkResult(
        task=task,
        sols=sorted(out),
        candidates=candidates,
        rejected_residue=rejected_residue,
        rejected_root=rejected_root,
        accepted=accepted,
        elapsed_sec=time.time() - t0,
        hits=hits,
    )


def search_stats(
    bound: int = BOUND,
    workers: int = 1,
    stripes: int = 0,
    logf: Optional[TextIO] = None,
) -> Tuple[Set[int], Dict[str, object]]:
    """Enumerate progressive perfect squares below bound.

    Returns the solution set together with aggregated counters.  With
    workers > 1 the a range is striped over a process pool and the partial
    sets are merged here; the result does not depend on the worker count.
    """
    a_start = 1
    a_end = a_limit(bound)
    window = max(1, a_end - a_start)

    if workers > 1:
        step = stripes if stripes > 0 else workers * 16
        step = min(step, window)
    else:
        step = 1
    tasks = [ChunkTask(offset=o) for o in range(step)]
    params = SearchParams(bound=bound, a_start=a_start, a_end=a_end, step=step)

    found: Set[int] = set()
    stats: Dict[str, object] = {
        "bound": bound,
        "modulus": MODULUS,
        "a_end": a_end,
        "workers": workers,
        "striped_step": step,
        "tasks": len(tasks),
        "candidates": 0,
        "rejected_residue": 0,
        "rejected_root": 0,
        "accepted": 0,
        "solutions": 0,
        "worker_sec": 0.0,
    }

    def absorb(res: ChunkResult) -> None:
        stats["candidates"] = int(stats["candidates"]) + res.candidates
        stats["rejected_residue"] = int(stats["rejected_residue"]) + res.rejected_residue
        stats["rejected_root"] = int(stats["rejected_root"]) + res.rejected_root
        stats["accepted"] = int(stats["accepted"]) + res.accepted
        stats["worker_sec"] = float(stats["worker_sec"]) + res.elapsed_sec
        found.update(res.sols)
        if logf is not None and res.hits:
            for a, b, c, n in res.hits:
                logf.write(f"{utc_now_iso()} hit a={a} b={b} c={c} n={n} root={math.isqrt(n)}\n")
            logf.flush()

    def progress(done: int) -> None:
        if logf is None:
            return
        if done % 25 == 0 or done == len(tasks):
            logf.write(
                f"{utc_now_iso()} progress chunks_done={done}/{len(tasks)} "
                f"candidates={stats['candidates']} "
                f"residue_rejected={stats['rejected_residue']} "
                f"root_rejected={stats['rejected_root']} "
                f"solutions={len(found)}\n"
            )
            logf.flush()

    if workers > 1:
        ctx = get_context("fork") if sys.platform == "darwin" else get_context()
        with ctx.Pool(
            processes=workers,
            initializer=_init_worker,
            initargs=(DEBUG, ASSERTIONS),
        ) as pool:
            done = 0
            for res in pool.imap_unordered(worker_chunk, [(t, params) for t in tasks], chunksize=1):
                done += 1
                absorb(res)
                progress(done)
    else:
        for done, task in enumerate(tasks, 1):
            absorb(worker_chunk((task, params)))
            progress(done)

    stats["solutions"] = len(found)
    return found, stats


def search(bound: int = BOUND, workers: int = 1) -> Set[int]:
    sols, _stats = search_stats(bound=bound, workers=workers)
    return sols


def report(sols: Iterable[int], out: Optional[TextIO] = None) -> None:
    """Print each solution's square root, a blank line, then the sum of the solutions."""
    out = out if out is not None else sys.stdout
    sols = sorted(sols)
    for sol in sols:
        print(math.isqrt(sol), file=out)

    print(file=out)
    print(sum(sols), file=out)


def main() -> None:
    global DEBUG, ASSERTIONS

    ap = argparse.ArgumentParser(
        description=f"{program_name}: sum of progressive perfect squares below {BOUND}.",
    )
    ap.add_argument("--version", action="store_true",
                    help="Print version/environment info and exit")
    ap.add_argument("--workers", type=int, default=1,
                    help="Worker processes. 1 (default) runs in-process; 0 = one per CPU.")
    ap.add_argument("--stripes", type=int, default=0,
                    help="Number of striped a-tasks for the pool (default workers*16). Needs --workers != 1.")
    ap.add_argument("--debug", action="store_true",
                    help="Log every square found with its (a, b, c) triple.")
    ap.add_argument("--assertions", action="store_true",
                    help="Check r < d <= q, d² = r·q and n = d·q + r for every candidate.")
    args = ap.parse_args()

    if args.workers < 0:
        ap.error(f"--workers must be >= 0 (got {args.workers})")
    if args.stripes < 0:
        ap.error(f"--stripes must be >= 0 (got {args.stripes})")
    if args.stripes > 0 and args.workers == 1:
        ap.error("--stripes needs --workers 0 or > 1; a single worker runs unstriped")

    if args.version:
        info = env_block(__file__, sys.argv)
        print(json.dumps(info, indent=2, sort_keys=True))
        return

    DEBUG = bool(args.debug)
    ASSERTIONS = bool(args.assertions)

    workers = args.workers if args.workers > 0 else (os.cpu_count() or 1)
    logf = sys.stderr
    env = env_block(__file__, sys.argv)

    print(f"[+] {program_name} v{program_version}", file=logf)
    print(f"[+] bound={BOUND} modulus={MODULUS} a_end={a_limit(BOUND)}", file=logf)
    print(f"[+] workers={workers} stripes={args.stripes or 'auto'}", file=logf)
    print(f"[+] debug={DEBUG} assertions={ASSERTIONS}", file=logf)
    print(f"[+] start time (UTC): {utc_now_iso()}\n", file=logf)

    logf.write(f"{utc_now_iso()} START script_sha256={env['script_sha256']} "
               f"git_commit={env['git_commit']}\n")
    logf.flush()

    t0 = time.time()
    sols, stats = search_stats(bound=BOUND, workers=workers, stripes=args.stripes, logf=logf)
    runtime = time.time() - t0

    report(sols)

    logf.write(
        f"{utc_now_iso()} DONE solutions={stats['solutions']} sum={sum(sols)} "
        f"candidates={stats['candidates']} worker_sec={float(stats['worker_sec']):.3f} "
        f"runtime_sec={runtime:.3f}\n"
    )
    logf.flush()


if __name__ == "__main__":
    if sys.platform == "darwin":
        try:
            import multiprocessing as mp
            mp.set_start_method("fork")
        except RuntimeError:
            pass
    main()

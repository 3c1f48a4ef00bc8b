#!/usr/bin/env python3
"""
SRA CLI – demos for the commutative cryptosystem, plus the worker loop.

Usage:
  Interactive menu:
    python sra_cli.py

  Non-interactive:
    python sra_cli.py --run prime --bits 128 --radix 10
    python sra_cli.py --run keypair
    python sra_cli.py --run residues
    python sra_cli.py --run roundtrip
    python sra_cli.py --run entropy
    python sra_cli.py --run dashboards
    python sra_cli.py --run all

  Worker (JSON lines on stdin/stdout, logs on stderr):
    python sra_cli.py --serve
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys
import textwrap
import time

# Ensure relative repo imports work even if executed from another directory.
sys.path.insert(0, str(pathlib.Path(__file__).parent.resolve()))

from sra.config import STRATEGIES, EngineConfig
from sra.errors import SRAError
from sra.quad_residues import check_residues, generate_quad_residues
from sra.randomness import RandomSource
from sra.sra_from_scratch import (
    commutative_roundtrip,
    generate_random_keypair,
    generate_random_prime,
)
from sra.worker import SRAWorker, serve_json_lines
from utils import console_ui
from utils.entropy import sample_source

from reports import make_all_dashboards as _dashboard_module

logger = logging.getLogger("sra_cli")

_LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int | str = logging.WARNING) -> None:
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format=_LOG_FORMAT,
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _print_summary(property_: str, evidence: str, caveat: str) -> None:
    console_ui.kv("Property", property_)
    console_ui.kv("Evidence", evidence)
    console_ui.kv("Caveat", caveat)


def run_prime(config: EngineConfig, source: RandomSource, bits: int = 128, radix: int = 16) -> int:
    console_ui.section(f"Random {bits}-bit prime")
    start = time.perf_counter()
    prime = generate_random_prime(bits, source=source, config=config)
    console_ui.kv_int("Prime", prime, radix)
    console_ui.kv("Bit length", prime.bit_length())
    console_ui.kv("Strategy", config.search_strategy)
    console_ui.elapsed("Search took", time.perf_counter() - start)
    return prime


def run_keypair(config: EngineConfig, source: RandomSource, bits: int = 128, radix: int = 16):
    prime = run_prime(config, source, bits, radix)
    console_ui.section("Keypair")
    keypair = generate_random_keypair(prime, source=source, config=config)
    console_ui.kv_int("encKey", keypair.enc_key, radix)
    console_ui.kv_int("decKey", keypair.dec_key, radix)
    console_ui.kv("encKey*decKey mod (p-1)", (keypair.enc_key * keypair.dec_key) % (prime - 1))
    _print_summary(
        "encKey*decKey ≡ 1 (mod p-1)",
        f"consistent={keypair.is_consistent()}",
        "downward search from a random start is not uniform over exponents",
    )
    return keypair


def run_residues(config: EngineConfig, prime: int = 23, count: int = 4) -> list:
    console_ui.section(f"Quadratic residues mod {prime}")
    series = generate_quad_residues(prime, count, config=config)
    console_ui.kv("Generated series", ", ".join(str(v) for v in series))
    sample = list(range(1, min(prime, 13)))
    classes = check_residues(sample, prime, config=config)
    for value, cls in zip(sample, classes):
        label = "residue" if cls == 1 else "non-residue"
        console_ui.bullet(f"{value}^{(prime - 1) // 2} mod {prime} = {cls} ({label})")
    _print_summary(
        "Euler's criterion separates residues (1) from non-residues (p-1)",
        f"{len(series)} consecutive residues from {(prime - 1) // 2 - 1}",
        "the series is deterministic despite the boundary name",
    )
    return series


def run_roundtrip(config: EngineConfig, source: RandomSource, bits: int = 128) -> dict:
    console_ui.section("Commutative encryption (two players)")
    out = commutative_roundtrip(bits, source=source)
    console_ui.kv_int("Shared prime", out["prime"])
    console_ui.kv_int("Card value", out["card"])
    console_ui.kv_int("E_bob(E_alice(card))", out["alice_then_bob"])
    console_ui.kv_int("E_alice(E_bob(card))", out["bob_then_alice"])
    console_ui.kv_int("Unlocked (Alice first)", out["unlocked"])
    _print_summary(
        "E_a(E_b(m)) == E_b(E_a(m)); locks can be removed in any order",
        f"commutes={out['commutes']} | recovered={out['ok']}",
        "SRA preserves quadratic residuosity; encode cards as residues",
    )
    if not (out["commutes"] and out["ok"]):
        console_ui.error("Commutative round-trip failed.")
    return out


def run_entropy(source: RandomSource) -> dict:
    console_ui.section("Randomness sanity checks")
    report = sample_source(source)
    console_ui.kv("Source", "secure (Crypto.Random)" if report["secure"] else "fallback (random.Random)")
    console_ui.kv("Samples", f"{report['samples']} x {report['bits']} bits")
    console_ui.kv("Bit balance", f"{report['bit_balance']:.3f} (ideal 0.5)")
    console_ui.kv("Byte entropy", f"{report['byte_entropy']:.2f} bits/byte")
    console_ui.kv("Distinct samples", report["distinct"])
    if report["balance_warn"] or report["entropy_warn"]:
        console_ui.warning("Sample statistics outside expected range.")
    if not report["secure"]:
        console_ui.warning("Fallback generator in use; not suitable for real games.")
    return report


def run_dashboards() -> list:
    console_ui.section("Export dashboards (PNG)")
    results = _dashboard_module.make_all_dashboards()
    for result in results:
        if result.status == "saved":
            console_ui.success(str(result.output.resolve()))
        else:
            console_ui.warning(f"{result.target.name} skipped: {result.reason}")
    return results


def run_all(config: EngineConfig, source: RandomSource, bits: int, radix: int) -> None:
    steps = [
        ("Random prime", lambda: run_prime(config, source, bits, radix)),
        ("Keypair", lambda: run_keypair(config, source, bits, radix)),
        ("Quadratic residues", lambda: run_residues(config)),
        ("Commutative round-trip", lambda: run_roundtrip(config, source, bits)),
        ("Randomness sanity checks", lambda: run_entropy(source)),
    ]
    total = len(steps)
    for index, (title, func) in enumerate(steps, start=1):
        console_ui.step_header(index, total, title)
        start = time.perf_counter()
        try:
            func()
        except SRAError as exc:
            console_ui.error(f"{title} failed: {type(exc).__name__}: {exc}")
        finally:
            console_ui.elapsed("DONE in", time.perf_counter() - start)
            console_ui.line()
    console_ui.success("All demos completed.")


def serve(config: EngineConfig, source: RandomSource) -> int:
    logger.info("Serving JSON-lines requests on stdin (strategy=%s)", config.search_strategy)
    with SRAWorker(config, source=source) as worker:
        return serve_json_lines(worker, sys.stdin, sys.stdout)


def menu() -> str:
    console_ui.banner("SRA Engine")
    console_ui.bullet("Choose a demo to run:")
    print("  1) Random prime")
    print("  2) Prime + keypair")
    print("  3) Quadratic residues (p = 23)")
    print("  4) Commutative round-trip")
    print("  5) Randomness sanity checks")
    print("  6) Run ALL")
    print("  7) Export dashboards (PNG)")
    print("  0) Exit")
    return input("\nEnter choice: ").strip()


def parse_args(argv=None):
    ap = argparse.ArgumentParser(
        description="SRA commutative cryptosystem demos and worker.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""
        Examples:
          python sra_cli.py --run prime --bits 256
          python sra_cli.py --run all --plain
          echo '{"method":"randomPrime","params":{"bitLength":64},"requestID":1}' | python sra_cli.py --serve
        """),
    )
    ap.add_argument(
        "--run",
        choices=["prime", "keypair", "residues", "roundtrip", "entropy", "dashboards", "all"],
        help="Run a specific demo non-interactively.",
    )
    ap.add_argument("--serve", action="store_true", help="Serve JSON-lines requests on stdin/stdout.")
    ap.add_argument("--bits", type=int, default=128, help="Prime size in bits for demos.")
    ap.add_argument("--radix", type=int, choices=[10, 16], default=16, help="Output radix for demos.")
    ap.add_argument("--strategy", choices=STRATEGIES, help="Search step after a failed candidate.")
    ap.add_argument("--workers", type=int, help="Worker threads in serve mode.")
    ap.add_argument(
        "--insecure-random",
        action="store_true",
        help="Use the seedable random.Random fallback instead of Crypto.Random.",
    )
    ap.add_argument("--seed", type=int, help="Seed for the fallback generator (implies --insecure-random).")
    ap.add_argument(
        "--no-verify-primes",
        action="store_true",
        help="Skip the primality check on caller-supplied primes.",
    )
    ap.add_argument("--plain", action="store_true", help="Disable colors/banners; print plain ASCII.")
    ap.add_argument("--log-level", default="WARNING", help="Logging verbosity (DEBUG, INFO, WARNING, ...)")
    return ap.parse_args(argv)


def build_config(args) -> EngineConfig:
    config = EngineConfig.from_env()
    insecure = args.insecure_random or args.seed is not None
    return config.with_overrides(
        use_secure_source=False if insecure else None,
        verify_primes=False if args.no_verify_primes else None,
        search_strategy=args.strategy,
        max_workers=args.workers,
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    try:
        config = build_config(args)
    except SRAError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    source = RandomSource(config.use_secure_source, seed=args.seed)

    if args.serve:
        serve(config, source)
        return 0

    console_ui.init(plain=args.plain)
    if args.run:
        mapping = {
            "prime": lambda: run_prime(config, source, args.bits, args.radix),
            "keypair": lambda: run_keypair(config, source, args.bits, args.radix),
            "residues": lambda: run_residues(config),
            "roundtrip": lambda: run_roundtrip(config, source, args.bits),
            "entropy": lambda: run_entropy(source),
            "dashboards": run_dashboards,
            "all": lambda: run_all(config, source, args.bits, args.radix),
        }
        try:
            mapping[args.run]()
        except SRAError as exc:
            console_ui.error(f"{type(exc).__name__}: {exc}")
            return 1
        return 0

    actions = {
        "1": lambda: run_prime(config, source, args.bits, args.radix),
        "2": lambda: run_keypair(config, source, args.bits, args.radix),
        "3": lambda: run_residues(config),
        "4": lambda: run_roundtrip(config, source, args.bits),
        "5": lambda: run_entropy(source),
        "6": lambda: run_all(config, source, args.bits, args.radix),
        "7": run_dashboards,
    }
    while True:
        choice = menu()
        if choice == "0" or choice.lower() in {"q", "quit", "exit"}:
            print("Goodbye!")
            return 0
        action = actions.get(choice)
        if action is None:
            console_ui.warning("Invalid choice. Please select 0-7.")
            continue
        try:
            action()
        except SRAError as exc:
            console_ui.error(f"{type(exc).__name__}: {exc}")
        input("\nPress Enter to return to the main menu...")


if __name__ == "__main__":
    sys.exit(main())

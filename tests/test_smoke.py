import os
import pathlib
import sys

# Ensure matplotlib uses a non-interactive backend for headless test runs.
os.environ.setdefault("MPLBACKEND", "Agg")

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def test_sra_roundtrip():
    from sra.sra_from_scratch import sra_roundtrip

    prime, keypair, ok = sra_roundtrip()
    assert ok and keypair.prime == prime and prime.bit_length() == 64


def test_commutative_roundtrip():
    from sra.sra_from_scratch import commutative_roundtrip

    out = commutative_roundtrip(96)
    assert out["commutes"] and out["ok"]


def test_entropy_sample_on_seeded_fallback():
    from sra.randomness import RandomSource
    from utils.entropy import sample_source

    report = sample_source(RandomSource(secure=False, seed=2024))
    assert not report["secure"]
    assert not report["balance_warn"]
    assert report["distinct"] == report["samples"]


def test_performance_dashboard(tmp_path):
    from reports.performance_dashboard import make_performance_dashboard

    out = make_performance_dashboard(tmp_path / "perf.png", bit_lengths=(16, 32), trials=1)
    assert out.exists()


def test_all_dashboards(tmp_path):
    from reports.make_all_dashboards import make_all_dashboards

    results = make_all_dashboards(tmp_path)
    assert [r.status for r in results] == ["saved", "saved"]
    assert all(r.output.exists() for r in results)


def test_cli_runs_demos(capsys):
    import sra_cli

    assert sra_cli.main(["--run", "residues", "--plain"]) == 0
    assert sra_cli.main(["--run", "keypair", "--bits", "48", "--seed", "5", "--plain"]) == 0
    out = capsys.readouterr().out
    assert "12, 13, 16, 18" in out
    assert "consistent=True" in out

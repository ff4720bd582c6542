"""
Tests for the independent output checker.
"""

import io

import pytest
import sympy

import Progressive_Checker as pc
import Progressive_Solver as ps


class TestFindProgression:

    def test_example_58(self):
        assert pc.find_progression(58) == (6, 9, 4)

    def test_nine(self):
        # 9 = 2*4 + 1 with 1, 2, 4
        assert pc.find_progression(9) == (2, 4, 1)

    def test_not_progressive(self):
        assert pc.find_progression(10) is None
        assert pc.find_progression(16) is None

    @pytest.mark.parametrize("n", [9, 10404, 16900, 97344])
    def test_known_squares(self, n):
        d, q, r = pc.find_progression(n)
        assert r < d <= q
        assert d * d == r * q
        assert d * q + r == n

    def test_agrees_with_generator_below_2000(self):
        generated = {n for _, _, _, n in ps.iter_candidates(2000)}
        brute = {n for n in range(1, 2000) if pc.find_progression(n) is not None}
        assert brute == generated


class TestCheckProgressiveSquare:

    def test_valid(self):
        result = pc.check_progressive_square(102)
        assert result['is_valid']
        assert result['n'] == 10404
        assert result['factorization'] == {2: 2, 3: 2, 17: 2}
        d, q, r = result['witness']
        assert result['ratio'] == sympy.Rational(d, r)

    def test_invalid(self):
        result = pc.check_progressive_square(4)
        assert not result['is_valid']
        assert result['witness'] is None


class TestParseOutput:

    def test_roundtrip_with_report(self):
        out = io.StringIO()
        ps.report(ps.search(100000), out=out)
        roots, declared, errors = pc.parse_output(out.getvalue().splitlines())
        assert roots == [3, 102, 130, 312]
        assert declared == 124657
        assert errors == []

    def test_missing_sum(self):
        assert pc.parse_output(["3", "102"]) == ([3, 102], None, [])


class TestCheckFile:

    def test_solver_output_passes(self, tmp_path):
        path = tmp_path / "progressive_squares.txt"
        with open(path, "w") as f:
            ps.report(ps.search(10**7), out=f)
        assert pc.check_file(str(path)) == []

    def test_bad_sum_and_bad_root(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("3\n4\n\n26\n")
        errors = pc.check_file(str(path))
        assert len(errors) == 2
        assert "root 4" in errors[0]
        assert "declared sum 26" in errors[1]

    def test_unparsable_root_is_reported(self, tmp_path):
        path = tmp_path / "garbled.txt"
        path.write_text("3\nabc\n\n9\n")
        errors = pc.check_file(str(path))
        assert errors == ["Line 2: Error parsing 'abc'"]

    def test_unparsable_sum_is_reported(self, tmp_path):
        path = tmp_path / "garbled_sum.txt"
        path.write_text("3\n\nxyz\n")
        errors = pc.check_file(str(path))
        assert errors == ["Line 3: Error parsing 'xyz'", "sum line missing"]

    def test_main_fails_on_unparsable_line(self, tmp_path, monkeypatch):
        path = tmp_path / "garbled.txt"
        path.write_text("3\n1O2\n\n10413\n")
        monkeypatch.setattr("sys.argv", ["Progressive_Checker.py", str(path)])
        assert pc.main() == 1

    def test_main_exit_status(self, tmp_path, monkeypatch):
        path = tmp_path / "ok.txt"
        path.write_text("3\n102\n\n10413\n")
        monkeypatch.setattr("sys.argv", ["Progressive_Checker.py", str(path)])
        assert pc.main() == 0
        path.write_text("3\n102\n\n10414\n")
        assert pc.main() == 1

#!/usr/bin/env python3
"""
Test report runner for the Huffman compressor.

This script:
- Runs the pytest suite in tests/ against the modules in the project root
- Collects per-test outcomes from the verbose pytest output
- Writes a JSON report with environment metadata

Run with:
    python evaluation/evaluation.py [--output report.json] [--timeout 300]
"""
import argparse
import json
import os
import platform
import subprocess
import sys
import traceback
import uuid
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
OUTCOMES = ("passed", "failed", "error", "skipped")
STATUS_WORDS = {" PASSED": "passed", " FAILED": "failed", " ERROR": "error", " SKIPPED": "skipped"}


def generate_run_id():
    """Generate a short unique run ID."""
    return uuid.uuid4().hex[:8]


def _git(*args):
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
            timeout=5,
        )
    except (OSError, subprocess.TimeoutExpired):
        return "unknown"
    return result.stdout.strip() if result.returncode == 0 else "unknown"


def get_git_info():
    commit = _git("rev-parse", "HEAD")
    return {
        "git_commit": commit[:8] if commit != "unknown" else commit,
        "git_branch": _git("rev-parse", "--abbrev-ref", "HEAD"),
    }


def get_environment_info():
    """Collect environment information for the report."""
    return {
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "os": platform.system(),
        "os_release": platform.release(),
        "architecture": platform.machine(),
        "hostname": platform.node(),
        **get_git_info(),
    }


def parse_pytest_verbose_output(output):
    """
    Parse lines such as
    ``tests/test_huffman_service.py::test_roundtrip_abccba PASSED [ 10%]``
    into ``{"nodeid", "name", "outcome"}`` dicts.
    """
    tests = []
    for line in output.splitlines():
        line = line.strip()
        if "::" not in line:
            continue
        for status_word, outcome in STATUS_WORDS.items():
            if status_word in line:
                nodeid = line.split(status_word)[0].strip()
                tests.append({
                    "nodeid": nodeid,
                    "name": nodeid.split("::")[-1],
                    "outcome": outcome,
                })
                break
    return tests


def summarize(tests):
    summary = {outcome: sum(1 for t in tests if t["outcome"] == outcome) for outcome in OUTCOMES}
    summary["total"] = len(tests)
    return summary


def run_pytest(tests_dir, timeout):
    """
    Run pytest on ``tests_dir`` with the project root on PYTHONPATH.

    Returns a dict with the exit code, per-test outcomes, a summary and the
    tail of stdout/stderr.
    """
    print(f"\n{'=' * 60}")
    print("RUNNING TESTS")
    print(f"{'=' * 60}")
    print(f"Tests directory: {tests_dir}")

    cmd = [sys.executable, "-m", "pytest", str(tests_dir), "-v", "--tb=short"]
    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(PROJECT_ROOT), env.get("PYTHONPATH")]))

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
            env=env,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        print("Test execution timed out")
        return {
            "success": False,
            "exit_code": -1,
            "tests": [],
            "summary": {"error": "Test execution timed out"},
            "stdout": "",
            "stderr": "",
        }

    tests = parse_pytest_verbose_output(result.stdout)
    summary = summarize(tests)
    print(
        f"\nResults: {summary['passed']} passed, {summary['failed']} failed, "
        f"{summary['error']} errors, {summary['skipped']} skipped (total: {summary['total']})"
    )
    for test in tests:
        print(f"  {test['outcome'].upper():8} {test['nodeid']}")

    return {
        "success": result.returncode == 0,
        "exit_code": result.returncode,
        "tests": tests,
        "summary": summary,
        "stdout": result.stdout[-3000:],
        "stderr": result.stderr[-1000:],
    }


def generate_output_path(now=None):
    """Generate output path in format: evaluation/YYYY-MM-DD/HH-MM-SS/report.json"""
    now = now or datetime.now()
    output_dir = PROJECT_ROOT / "evaluation" / now.strftime("%Y-%m-%d") / now.strftime("%H-%M-%S")
    return output_dir / "report.json"


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the test suite and write a JSON report")
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output JSON file path (default: evaluation/YYYY-MM-DD/HH-MM-SS/report.json)",
    )
    parser.add_argument(
        "--tests-dir",
        type=str,
        default=str(PROJECT_ROOT / "tests"),
        help="Directory handed to pytest",
    )
    parser.add_argument("--timeout", type=int, default=300, help="Seconds before the run is abandoned")
    args = parser.parse_args(argv)

    run_id = generate_run_id()
    started_at = datetime.now()
    print(f"Run ID: {run_id}")
    print(f"Started at: {started_at.isoformat()}")

    try:
        results = run_pytest(args.tests_dir, args.timeout)
        success = results["success"]
        error_message = None if success else "Test suite failed"
    except Exception as e:
        print(f"\nERROR: {e}")
        traceback.print_exc()
        results = None
        success = False
        error_message = str(e)

    finished_at = datetime.now()
    duration = (finished_at - started_at).total_seconds()

    report = {
        "run_id": run_id,
        "started_at": started_at.isoformat(),
        "finished_at": finished_at.isoformat(),
        "duration_seconds": round(duration, 6),
        "success": success,
        "error": error_message,
        "environment": get_environment_info(),
        "results": results,
    }

    output_path = Path(args.output) if args.output else generate_output_path(started_at)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)

    print(f"\nReport saved to: {output_path}")
    print(f"Duration: {duration:.2f}s")
    print(f"Success: {'YES' if success else 'NO'}")
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
테스트 실행 스크립트

Usage:
    python run_tests.py               # 모든 테스트 실행
    python run_tests.py --unit        # 단위 테스트만 실행
    python run_tests.py --integration # 통합 테스트만 실행
    python run_tests.py --presence    # presence(heartbeat/sweep) 테스트만 실행
    python run_tests.py --coverage    # 커버리지 포함하여 실행
"""

import sys
import subprocess
import argparse
from pathlib import Path

PYTEST = [sys.executable, "-m", "pytest", "-v", "--tb=short"]

SUITES = {
    "unit": (["tests/unit/"], "단위 테스트 실행"),
    "integration": (["tests/integration/"], "통합 테스트 실행"),
    "presence": (
        ["tests/unit/test_presence_tracker.py", "tests/unit/test_presence_monitor.py"],
        "presence 테스트 실행"
    ),
    "coverage": (
        ["tests/", "--cov=app", "--cov-report=term-missing", "--cov-report=html:htmlcov"],
        "커버리지 포함 테스트 실행"
    ),
    "all": (["tests/"], "전체 테스트 실행"),
}


def run_command(cmd, description=""):
    """명령어 실행"""
    print(f"\n{'='*60}")
    print(f"🚀 {description}")
    print(f"{'='*60}")
    print(f"실행 명령어: {' '.join(cmd)}")
    print()

    try:
        subprocess.run(cmd, check=True)
    except subprocess.CalledProcessError as e:
        print(f"\n❌ {description} 실패! (exit code: {e.returncode})")
        return False

    print(f"\n✅ {description} 성공!")
    return True


def main():
    parser = argparse.ArgumentParser(description="테스트 실행 스크립트")
    group = parser.add_mutually_exclusive_group()
    for suite in SUITES:
        if suite != "all":
            group.add_argument(f"--{suite}", action="store_true", help=SUITES[suite][1])
    parser.add_argument("--install", action="store_true", help="테스트 의존성 설치 (pip install -e .[test])")

    args = parser.parse_args()

    # 프로젝트 루트 디렉토리 기준으로 실행
    project_root = Path(__file__).parent
    print(f"📁 프로젝트 디렉토리: {project_root.absolute()}")

    success = True

    if args.install:
        success &= run_command(
            [sys.executable, "-m", "pip", "install", "-e", ".[test]"],
            "테스트 의존성 설치"
        )

    suite = next((name for name in SUITES if getattr(args, name, False)), "all")
    paths, description = SUITES[suite]
    success &= run_command(PYTEST + paths, description)

    print(f"\n{'='*60}")
    print("🎉 모든 작업이 성공적으로 완료되었습니다!" if success else "💥 일부 작업이 실패했습니다.")
    print(f"{'='*60}")

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())

import nox

PYTHON_VERSION = "3.12"
PACKAGES = ["chronology", "events", "simulation", "store"]
MODULES = ["config.py", "config_cache.py", "logger.py", "main.py", "sim_clock.py"]
TARGETS = PACKAGES + MODULES
EXCLUDES = [".nox", "__pycache__", "*.egg-info", "tests/__pycache__"]

nox.options.sessions = ["lint", "tests"]


@nox.session(python=PYTHON_VERSION)
def lint(session: nox.Session) -> None:
    """Check formatting, lint, types and dead code without rewriting files."""
    session.install(".[dev]")
    session.run("black", "--check", *TARGETS, "tests")
    session.run("isort", "--check-only", *TARGETS, "tests")
    session.run("ruff", "check", *TARGETS, "tests")
    session.run("mypy", *TARGETS)
    session.run(
        "vulture",
        *TARGETS,
        "--exclude",
        ",".join(EXCLUDES),
        success_codes=[0, 3],
    )
    session.run("lizard", *TARGETS, "--exclude", ",".join(EXCLUDES))


@nox.session(python=PYTHON_VERSION)
def tests(session: nox.Session) -> None:
    """Execute the pytest suite; extra arguments are passed through."""
    session.install(".[dev]")
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSION)
def format(session: nox.Session) -> None:
    """Rewrite code with Black and isort."""
    session.install("black", "isort")
    session.run("black", *TARGETS, "tests")
    session.run("isort", *TARGETS, "tests")

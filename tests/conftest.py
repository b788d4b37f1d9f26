"""Pytest configuration and fixtures for tsgraph tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from tsgraph.parser import SyntaxParser


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture(scope="session")
def ts_parser() -> SyntaxParser:
    """One parser for the whole session; grammars load lazily."""
    return SyntaxParser()


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to sample test project."""
    return Path(__file__).parent / "fixtures" / "sample_project"


@pytest.fixture
def isolated_config(temp_dir: Path, monkeypatch) -> Path:
    """Point the config manager at a throwaway config.toml."""
    config_file = temp_dir / "home" / "config.toml"
    monkeypatch.setattr("tsgraph.config_manager.CONFIG_FILE", config_file)
    return config_file


@pytest.fixture
def sample_ts_code() -> str:
    """Sample TypeScript code for testing."""
    return '''import { Logger } from "./logger";

export interface Shape {
  name: string;
  area(): number;
}

export class Circle implements Shape {
  name: string;
  radius: number;

  constructor(radius: number) {
    this.name = "circle";
    this.radius = radius;
  }

  area(): number {
    return Math.PI * this.radius * this.radius;
  }
}

export function describe(shape: Shape): string {
  return `${shape.name}: ${shape.area()}`;
}

export const LIMIT = 42;
'''


@pytest.fixture
def sample_tsx_code() -> str:
    """Sample TSX component code for testing."""
    return '''interface ButtonProps {
  label: string;
  disabled: boolean;
}

export function Button({ label, disabled }: ButtonProps) {
  return <button disabled={disabled}>{label}</button>;
}

const Card = () => <div className="card" />;
'''

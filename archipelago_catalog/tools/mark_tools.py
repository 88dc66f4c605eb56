from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

import pandas as pd
import yaml

from ..schema import ARCHIPELAGO_TOOLS, NAME_COL, NAME_CORRECTIONS, SOURCE_COLUMNS, TOOL_COL
from ..utils.utilities import read_csv, write_csv


@dataclass(frozen=True)
class MarkToolsResult:
    rows: int
    names_corrected: int
    tools_marked: int
    backup_path: Path | None


def load_overrides(path: Path | None) -> tuple[set[str], dict[str, str]]:
    """
    Built-in tool names and name corrections, extended by an optional YAML file:

        tools: [My Puzzle, ...]
        corrections: {Old Name: New Name}
    """
    tools = set(ARCHIPELAGO_TOOLS)
    corrections = dict(NAME_CORRECTIONS)
    if path is None:
        return tools, corrections
    if not path.exists():
        raise FileNotFoundError(f"Overrides file not found: {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Overrides file must contain a mapping: {path}")
    extra_tools = data.get("tools") or []
    extra_corrections = data.get("corrections") or {}
    if not isinstance(extra_tools, list) or not isinstance(extra_corrections, dict):
        raise ValueError(f"Overrides file expects 'tools' as a list and 'corrections' as a mapping: {path}")
    tools.update(str(t).strip() for t in extra_tools if str(t).strip())
    corrections.update({str(k).strip(): str(v).strip() for k, v in extra_corrections.items()})
    return tools, corrections


def _ordered_columns(df: pd.DataFrame) -> list[str]:
    head = [c for c in SOURCE_COLUMNS if c in df.columns]
    return head + [c for c in df.columns if c not in head]


def mark_tools(
    csv_path: Path,
    *,
    backup: bool = True,
    overrides_path: Path | None = None,
) -> MarkToolsResult:
    """
    Rewrite the source CSV in place: apply name corrections, then classify each row as an
    Archipelago tool or a game in the IsArchipelagoTool column.
    """
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")
    tools, corrections = load_overrides(overrides_path)

    df = read_csv(csv_path)
    df.columns = [str(c).strip() for c in df.columns]
    if NAME_COL not in df.columns:
        raise ValueError(f"Missing '{NAME_COL}' column in {csv_path}")
    for col in df.columns:
        df[col] = df[col].str.strip()

    backup_path: Path | None = None
    if backup:
        backup_path = csv_path.with_name(csv_path.name + ".backup")
        shutil.copyfile(csv_path, backup_path)
        logging.info(f"[TOOLS] Backup created: {backup_path}")

    corrected_mask = df[NAME_COL].isin(list(corrections))
    for old in df.loc[corrected_mask, NAME_COL].tolist():
        logging.info(f"[TOOLS] Correcting: '{old}' -> '{corrections[old]}'")
    df[NAME_COL] = df[NAME_COL].map(lambda n: corrections.get(n, n))

    is_tool = df[NAME_COL].isin(list(tools))
    df[TOOL_COL] = is_tool.map({True: "true", False: "false"})

    write_csv(df[_ordered_columns(df)], csv_path)

    result = MarkToolsResult(
        rows=len(df),
        names_corrected=int(corrected_mask.sum()),
        tools_marked=int(is_tool.sum()),
        backup_path=backup_path,
    )
    logging.info("[TOOLS] ✓ CSV update complete!")
    logging.info(f"[TOOLS]   - Games corrected: {result.names_corrected}")
    logging.info(f"[TOOLS]   - Tools marked: {result.tools_marked}")
    logging.info(f"[TOOLS]   - Total rows: {result.rows}")
    return result

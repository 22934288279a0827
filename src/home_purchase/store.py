from __future__ import annotations

import csv
import io
import json
import logging
import uuid
from dataclasses import asdict, dataclass, fields, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .schemas import PlannerSettings, ScenarioRecord
from .validation import validate_scenario

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Property Name",
    "Purchase Price",
    "Down Payment %",
    "Interest Rate",
    "Loan Term",
    "Property Tax",
    "Insurance",
    "HOA",
    "Utilities",
    "Maintenance",
    "Annual Income",
    "Monthly Debts",
    "Investment Return",
    "Timestamp",
]


@dataclass
class ImportResult:
    success: bool
    message: str
    new_count: int = 0
    updated_count: int = 0


class ScenarioStore:
    """
    Scenario persistence in a single JSON file.

    The file holds a JSON array of scenario records in the same layout the
    web calculator exports, keyed by each record's ``id``.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()

    def list_scenarios(self) -> List[ScenarioRecord]:
        records = (self._parse(item) for item in self._read())
        return [record for record in records if record is not None]

    def load_scenario(self, scenario_id: str) -> Optional[ScenarioRecord]:
        for item in self._read():
            if item.get("id") == scenario_id:
                return self._parse(item)
        return None

    def save_scenario(self, record: ScenarioRecord) -> str:
        """Insert or replace a scenario and return its id."""
        validate_scenario(record).raise_for_errors()
        if not record.id:
            record.id = new_scenario_id()
        record.timestamp = _now()

        items = self._read()
        payload = record.to_dict()
        for index, item in enumerate(items):
            if item.get("id") == record.id:
                items[index] = payload
                logger.info("updated scenario %s (%s)", record.id, record.name)
                break
        else:
            items.append(payload)
            logger.info("saved scenario %s (%s)", record.id, record.name)
        self._write(items)
        return record.id

    def update_scenario(self, scenario_id: str, **changes: Any) -> bool:
        record = self.load_scenario(scenario_id)
        if record is None:
            return False
        self.save_scenario(replace(record, **changes))
        return True

    def delete_scenario(self, scenario_id: str) -> bool:
        items = self._read()
        remaining = [item for item in items if item.get("id") != scenario_id]
        if len(remaining) == len(items):
            return False
        self._write(remaining)
        logger.info("deleted scenario %s", scenario_id)
        return True

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()

    def import_json(self, text: str) -> ImportResult:
        """
        Merge an exported array of scenarios into the store.

        Every record is validated first; a single invalid record rejects the
        whole import. Records whose id already exists replace the stored copy.
        """
        try:
            imported = json.loads(text)
        except json.JSONDecodeError as exc:
            return ImportResult(False, f"Error importing scenarios: {exc}")

        if not isinstance(imported, list):
            return ImportResult(
                False, "Invalid JSON format: expected an array of scenarios"
            )
        for item in imported:
            if not isinstance(item, dict) or not validate_scenario(item).valid:
                return ImportResult(False, "Invalid scenario data in import file")

        # normalise through the record type so stored files stay consistent
        try:
            payloads = [ScenarioRecord.from_dict(item).to_dict() for item in imported]
        except (TypeError, ValueError, KeyError) as exc:
            return ImportResult(False, f"Error importing scenarios: {exc}")

        items = self._read()
        index_by_id = {item.get("id"): i for i, item in enumerate(items)}
        new_count = updated_count = 0
        for payload in payloads:
            if not payload["id"]:
                payload["id"] = new_scenario_id()
            existing = index_by_id.get(payload["id"])
            if existing is not None:
                items[existing] = payload
                updated_count += 1
            else:
                index_by_id[payload["id"]] = len(items)
                items.append(payload)
                new_count += 1
        self._write(items)

        return ImportResult(
            True,
            f"Import successful: {new_count} new scenarios added, "
            f"{updated_count} updated",
            new_count=new_count,
            updated_count=updated_count,
        )

    def export_json(self, scenario_ids: Optional[Iterable[str]] = None) -> str:
        items = self._read()
        if scenario_ids is not None:
            wanted = set(scenario_ids)
            items = [item for item in items if item.get("id") in wanted]
        return json.dumps(items, indent=2)

    def _parse(self, item: Dict[str, Any]) -> Optional[ScenarioRecord]:
        try:
            return ScenarioRecord.from_dict(item)
        except (TypeError, ValueError, KeyError) as exc:
            logger.warning("unreadable scenario %s in %s: %s", item.get("id"), self.path, exc)
            return None

    def _read(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("could not read scenario store %s: %s", self.path, exc)
            return []
        if not isinstance(data, list):
            logger.warning("scenario store %s does not hold a list", self.path)
            return []
        records = [item for item in data if isinstance(item, dict)]
        if len(records) != len(data):
            logger.warning(
                "skipped %d malformed entries in scenario store %s",
                len(data) - len(records),
                self.path,
            )
        return records

    def _write(self, items: List[Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(items, indent=2), encoding="utf-8")


class SettingsStore:
    """
    Planner defaults kept in a small JSON object next to the scenarios.

    Unknown keys are ignored and missing keys fall back to
    ``PlannerSettings`` defaults, so an old or hand-edited file still loads.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()

    def load(self) -> PlannerSettings:
        data = self._read()
        known = {f.name for f in fields(PlannerSettings)}
        try:
            return PlannerSettings(**{k: v for k, v in data.items() if k in known})
        except (TypeError, ValueError) as exc:
            logger.warning("ignoring settings file %s: %s", self.path, exc)
            return PlannerSettings()

    def save(self, **changes: Any) -> PlannerSettings:
        settings = replace(self.load(), **changes)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(asdict(settings), indent=2), encoding="utf-8")
        logger.info("saved settings to %s", self.path)
        return settings

    def reset(self) -> None:
        if self.path.exists():
            self.path.unlink()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("could not read settings %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("settings file %s does not hold an object", self.path)
            return {}
        return data


def export_csv(record: ScenarioRecord) -> str:
    prop = record.property
    income = record.income
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerow(
        [
            record.name,
            prop.purchase_price,
            prop.down_payment_percent,
            prop.interest_rate,
            prop.loan_term_years,
            prop.property_tax,
            prop.insurance,
            prop.hoa,
            prop.utilities,
            prop.maintenance,
            income.annual_income,
            income.monthly_debts,
            income.investment_return,
            record.timestamp or "",
        ]
    )
    return buffer.getvalue().rstrip("\n")


def new_scenario_id() -> str:
    return str(uuid.uuid4())


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

"""CLI replaying captured search responses through a panel."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Mapping, Sequence

from rawgraph.config import PanelConfig, load_panel_config, merge_panel_defaults
from rawgraph.models import RenderReady
from rawgraph.retrieval.engine import InMemorySearchEngine
from rawgraph.services.events import PanelEvents
from rawgraph.services.panel import PanelController
from rawgraph.timerange.store import InMemoryFilterStore


def load_responses(path: Path) -> dict[str, Mapping[str, Any]]:
    """Read responses keyed by index name, or a list served as ``segment-N``."""

    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        return {f"segment-{index}": item for index, item in enumerate(data)}
    if isinstance(data, dict) and "hits" in data:
        return {"segment-0": data}
    if isinstance(data, dict):
        return dict(data)
    raise ValueError(f"Unsupported responses file: {path}")


def _panel_config(args: argparse.Namespace) -> PanelConfig:
    config = load_panel_config(args.panel) if args.panel else merge_panel_defaults()
    overrides: dict[str, Any] = {}
    if args.time_field:
        overrides["time_field"] = args.time_field
    if args.series:
        overrides["series"] = [{"value_field": name} for name in args.series]
    if overrides:
        config = merge_panel_defaults({**config.model_dump(), **overrides})
    return config


async def replay(responses: Mapping[str, Mapping[str, Any]], config: PanelConfig) -> dict[str, Any]:
    events = PanelEvents()
    rendered: list[RenderReady] = []
    events.on_render(rendered.append)
    panel = PanelController(
        InMemorySearchEngine(responses),
        InMemoryFilterStore(events),
        config,
        indices=list(responses),
        events=events,
    )
    await panel.refresh()
    accumulator = panel.accumulator
    return {
        "hits": accumulator.hits,
        "error": accumulator.error,
        "renders": len(rendered),
        "series": [
            {"label": s.label, "color": s.color, "hit_count": s.hit_count, "points": s.as_pairs()}
            for s in accumulator.series
        ],
    }


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Replay captured search responses into chart series")
    parser.add_argument("responses", type=Path, help="JSON file with one search response per index segment")
    parser.add_argument("--panel", type=Path, default=None, help="Persisted panel configuration JSON")
    parser.add_argument("--time-field", default=None, help="Override the panel time field")
    parser.add_argument("--series", nargs="*", default=None, help="Value fields to plot, one series each")
    parser.add_argument("--output", type=Path, default=None, help="Write the result JSON here instead of stdout")
    args = parser.parse_args(argv)

    result = asyncio.run(replay(load_responses(args.responses), _panel_config(args)))
    payload = json.dumps(result, indent=2)
    if args.output:
        args.output.write_text(payload, encoding="utf-8")
    else:
        print(payload)
    if result["error"]:
        print(f"Retrieval error: {result['error']}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

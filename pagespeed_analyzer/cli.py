from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import httpx
from rich import print

from pagespeed_analyzer.config import load_settings
from pagespeed_analyzer.errors import AnalyzerError
from pagespeed_analyzer.fetcher import STRATEGIES, PageSpeedFetcher
from pagespeed_analyzer.llm_groq import ReportGenerator, build_groq_client
from pagespeed_analyzer.summarizer import summarize


async def analyze_one(url: str, strategy: str = "desktop", out_path: Optional[str] = None) -> str:
    settings = load_settings()
    llm_client = build_groq_client(settings.groq_api_key)

    try:
        async with httpx.AsyncClient() as client:
            fetcher = PageSpeedFetcher(client, api_key=settings.pagespeed_api_key)
            payload = await fetcher.fetch(url, strategy=strategy)

        summary = summarize(payload)
        analysis = await ReportGenerator(llm_client, model=settings.groq_model).generate(summary)
    finally:
        if llm_client is not None:
            await llm_client.close()

    if out_path:
        Path(out_path).parent.mkdir(parents=True, exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump({"summary": summary.to_dict(), "analysis": analysis}, f, ensure_ascii=False, indent=2)
        print(f"Saved: {out_path}")

    score = summary.performance_score if summary.performance_score is not None else "n/a"
    print(f"[green]PageSpeed OK[/green] ({strategy})")
    print(f"Performance score: {score}")
    print(f"Opportunities: {len(summary.opportunities)}")
    print("\n[bold]Analysis:[/bold]\n" + analysis)
    return analysis


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Analyze a page with PageSpeed Insights and Groq.")
    parser.add_argument("url")
    parser.add_argument("--strategy", choices=STRATEGIES, default="desktop")
    parser.add_argument("--out", help="write summary and analysis as JSON to this path")
    args = parser.parse_args(argv)

    try:
        asyncio.run(analyze_one(args.url, strategy=args.strategy, out_path=args.out))
    except AnalyzerError as exc:
        print(f"[red]{exc.message}[/red]")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

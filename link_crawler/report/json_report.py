# link_crawler/report/json_report.py

"""
JSON report generation for LinkCrawler.

Serializes a CrawlReport to a file.
"""
import json
from pathlib import Path

from link_crawler.aggregator import CrawlReport


def render_json(report: CrawlReport, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Save *report* as JSON at *output_path*.

    :param report: CrawlReport of a finished run
    :param output_path: path of the JSON file
    :param pretty: indent the output (2 spaces)
    :return: Path of the saved file

    Example:
    ```python
    from link_crawler.report.json_report import render_json
    report_path = render_json(report, 'reports/crawl.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = {
        'seed_url': report.seed_url,
        'elapsed': report.elapsed,
        'visits': report.visits,
    }

    with output.open('w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2 if pretty else None)

    return output

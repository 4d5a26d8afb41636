import base64
import html as _html
import logging
from datetime import datetime as _dt
from pathlib import Path

logger = logging.getLogger(__name__)


def _img_data_uri(path) -> str:
    data = Path(path).read_bytes()
    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")


def _fmt(value, digits=3):
    try:
        return f"{float(value):.{digits}f}"
    except (TypeError, ValueError):
        return "-"


def generate_html(summary, season_rates, meta: dict, plots: dict = None) -> str:
    """
    Build the report page: model table, majority-class baseline, season
    table and the plot images inlined as data URIs so the file stands alone.

    ``meta`` carries ``seasons``, ``n_games``, ``baseline_accuracy``,
    ``n_splits`` and ``features``; ``plots`` maps a caption to a PNG path.
    """
    plots = plots or {}
    generated = _dt.now().strftime('%B %d, %Y')
    html = f"""<!DOCTYPE html>
<html lang='en'>
<head>
  <meta charset='UTF-8'/>
  <meta name='viewport' content='width=device-width, initial-scale=1.0'/>
  <title>Run First Inning (RFI) Classifier Benchmark</title>
  <link href='https://cdn.jsdelivr.net/npm/tailwindcss@2.2.19/dist/tailwind.min.css' rel='stylesheet'>
  <style>
    body {{ background-color:#0f172a; color:#e2e8f0; font-family:'Segoe UI',sans-serif; }}
    .title-highlight {{ background:linear-gradient(to right,#34d399,#06b6d4);
                       -webkit-background-clip:text; -webkit-text-fill-color:transparent; }}
    table {{ border-collapse: collapse; width:100%; }}
    th, td {{ padding:0.5rem; text-align:center; border:1px solid #fff; }}
    img {{ background:#fff; margin:0 auto; }}
  </style>
</head>
<body class='p-6'>
  <div class='text-center mb-6'>
    <h1 class='text-4xl font-extrabold title-highlight'>Run First Inning (RFI) Model Benchmark</h1>
    <p class='text-gray-400'>Seasons {_html.escape(str(meta.get('seasons', '-')))} — {meta.get('n_games', 0)} games — generated {generated}</p>
    <p class='text-gray-400'>{meta.get('n_splits', '-')}-fold stratified cross-validation on {len(meta.get('features', []))} predictors.
       Majority-class baseline accuracy: {_fmt(meta.get('baseline_accuracy'))}</p>
  </div>
  <div class='overflow-auto max-w-5xl mx-auto mb-8'>
    <table class='min-w-full text-gray-300 text-sm'>
      <thead class='bg-gray-900 text-gray-100 uppercase text-xs'>
        <tr>
          <th class='px-4 py-2'>Rank</th>
          <th class='px-4 py-2'>Model</th>
          <th class='px-4 py-2'>Mean AUC</th>
          <th class='px-4 py-2'>AUC Std</th>
          <th class='px-4 py-2'>Pooled AUC</th>
          <th class='px-4 py-2'>Mean Accuracy</th>
          <th class='px-4 py-2'>Accuracy Std</th>
        </tr>
      </thead>
      <tbody>
"""
    for rank, row in enumerate(summary.itertuples(index=False), start=1):
        shade = "bg-gray-700" if rank % 2 else "bg-gray-800"
        html += (
            "<tr>"
            f"<td class='px-4 py-2 {shade}'>{rank}</td>"
            f"<td class='px-4 py-2 {shade}'>{_html.escape(str(row.label))}</td>"
            f"<td class='px-4 py-2 {shade}'>{_fmt(row.auc_mean)}</td>"
            f"<td class='px-4 py-2 {shade}'>{_fmt(row.auc_std)}</td>"
            f"<td class='px-4 py-2 {shade}'>{_fmt(row.pooled_auc)}</td>"
            f"<td class='px-4 py-2 {shade}'>{_fmt(row.accuracy_mean)}</td>"
            f"<td class='px-4 py-2 {shade}'>{_fmt(row.accuracy_std)}</td>"
            "</tr>\n"
        )
    html += """      </tbody>
    </table>
  </div>
  <div class='overflow-auto max-w-3xl mx-auto mb-8'>
    <table class='min-w-full text-gray-300 text-sm'>
      <thead class='bg-gray-900 text-gray-100 uppercase text-xs'>
        <tr>
          <th class='px-4 py-2'>Season</th>
          <th class='px-4 py-2'>Games</th>
          <th class='px-4 py-2'>RFI Games</th>
          <th class='px-4 py-2'>RFI Rate</th>
        </tr>
      </thead>
      <tbody>
"""
    for row in season_rates.itertuples(index=False):
        html += (
            "<tr>"
            f"<td class='px-4 py-2 bg-gray-800'>{int(row.season)}</td>"
            f"<td class='px-4 py-2 bg-gray-800'>{int(row.games)}</td>"
            f"<td class='px-4 py-2 bg-gray-800'>{int(row.rfi_games)}</td>"
            f"<td class='px-4 py-2 bg-gray-800'>{_fmt(row.rfi_rate)}</td>"
            "</tr>\n"
        )
    html += "      </tbody>\n    </table>\n  </div>\n"

    for caption, path in plots.items():
        html += (
            "  <div class='max-w-5xl mx-auto mb-8 text-center'>\n"
            f"    <h2 class='text-xl font-bold mb-2'>{_html.escape(caption)}</h2>\n"
            f"    <img src='{_img_data_uri(path)}' alt='{_html.escape(caption)}'/>\n"
            "  </div>\n"
        )

    html += "</body>\n</html>\n"
    return html


def write_html(html: str, path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(html, encoding="utf-8")
    logger.info("Wrote HTML to %s", path)
    return path

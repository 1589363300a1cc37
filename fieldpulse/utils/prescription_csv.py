"""
CSV export of prescription maps for spreadsheet consumers.

One row per zone with the columns below; recommendations are joined
with "; ". Whole numbers are written without a trailing ".0".
"""
import csv
import io
from dataclasses import dataclass
from typing import List

from fieldpulse.domain.models import PrescriptionMap


CSV_COLUMNS = [
    "Zone ID",
    "Zone Name",
    "Area %",
    "Health Score",
    "Application Rate",
    "Recommendations",
]
RECOMMENDATION_SEPARATOR = "; "


@dataclass(frozen=True)
class ZoneRow:
    """A zone as read back from an exported CSV."""
    zone_id: str
    name: str
    area_percentage: float
    health_score: float
    application_rate: float
    recommendations: List[str]


def format_number(value: float) -> str:
    """Render 70.0 as "70" and 1.5 as "1.5"."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def export_filename(prescription: PrescriptionMap) -> str:
    return f"prescription_map_{prescription.created_date.isoformat()}.csv"


def to_csv(prescription: PrescriptionMap) -> str:
    """
    Serialize a prescription map to CSV text.

    Args:
        prescription: Map to export

    Returns:
        CSV content with a header row and one row per zone
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)

    for zone in prescription.zones:
        writer.writerow([
            zone.id,
            zone.name,
            format_number(zone.area_percentage),
            format_number(zone.health_score),
            format_number(zone.application_rate),
            RECOMMENDATION_SEPARATOR.join(zone.recommendations),
        ])

    return buffer.getvalue()


def parse_csv(content: str) -> List[ZoneRow]:
    """
    Parse CSV text produced by to_csv.

    Raises:
        ValueError: If the header does not match the export columns
    """
    reader = csv.reader(io.StringIO(content))
    header = next(reader, None)
    if header != CSV_COLUMNS:
        raise ValueError(f"Unexpected CSV header: {header}")

    rows = []
    for record in reader:
        if not record:
            continue
        zone_id, name, area, score, rate, recommendations = record
        rows.append(ZoneRow(
            zone_id=zone_id,
            name=name,
            area_percentage=float(area),
            health_score=float(score),
            application_rate=float(rate),
            recommendations=recommendations.split(RECOMMENDATION_SEPARATOR) if recommendations else [],
        ))
    return rows

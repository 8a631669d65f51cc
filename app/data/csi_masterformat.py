"""CSI MasterFormat reference data and the seed routine for ``cost_codes``.

Divisions are stored as level 1 codes (``"03 00 00"``), common sections as
level 2 codes whose ``parent_code`` is their division. Seed with::

    python -m app.data.csi_masterformat
"""
from loguru import logger

from app.database import get_supabase, execute

COST_CODE_TABLE = "cost_codes"

CSI_DIVISIONS = [
    ("00", "Procurement and Contracting Requirements"),
    ("01", "General Requirements"),
    ("02", "Existing Conditions"),
    ("03", "Concrete"),
    ("04", "Masonry"),
    ("05", "Metals"),
    ("06", "Wood, Plastics, and Composites"),
    ("07", "Thermal and Moisture Protection"),
    ("08", "Openings"),
    ("09", "Finishes"),
    ("10", "Specialties"),
    ("11", "Equipment"),
    ("12", "Furnishings"),
    ("13", "Special Construction"),
    ("14", "Conveying Equipment"),
    ("21", "Fire Suppression"),
    ("22", "Plumbing"),
    ("23", "HVAC"),
    ("25", "Integrated Automation"),
    ("26", "Electrical"),
    ("27", "Communications"),
    ("28", "Electronic Safety and Security"),
    ("31", "Earthwork"),
    ("32", "Exterior Improvements"),
    ("33", "Utilities"),
]

CSI_SECTIONS = [
    ("01", "01 10 00", "Summary"),
    ("01", "01 20 00", "Price and Payment Procedures"),
    ("01", "01 30 00", "Administrative Requirements"),
    ("01", "01 40 00", "Quality Requirements"),
    ("01", "01 50 00", "Temporary Facilities and Controls"),
    ("01", "01 60 00", "Product Requirements"),
    ("01", "01 70 00", "Execution and Closeout Requirements"),
    ("01", "01 80 00", "Performance Requirements"),
    ("02", "02 21 00", "Surveys"),
    ("02", "02 41 00", "Demolition"),
    ("02", "02 42 00", "Removal and Salvage"),
    ("03", "03 10 00", "Concrete Forming and Accessories"),
    ("03", "03 20 00", "Concrete Reinforcing"),
    ("03", "03 30 00", "Cast-in-Place Concrete"),
    ("03", "03 35 00", "Concrete Finishing"),
    ("03", "03 40 00", "Precast Concrete"),
    ("03", "03 50 00", "Cast Decks and Underlayment"),
    ("04", "04 20 00", "Unit Masonry"),
    ("04", "04 22 00", "Concrete Unit Masonry"),
    ("04", "04 40 00", "Stone Assemblies"),
    ("04", "04 70 00", "Manufactured Masonry"),
    ("05", "05 10 00", "Structural Metal Framing"),
    ("05", "05 12 00", "Structural Steel Framing"),
    ("05", "05 21 00", "Steel Joist Framing"),
    ("05", "05 31 00", "Steel Decking"),
    ("05", "05 40 00", "Cold-Formed Metal Framing"),
    ("05", "05 50 00", "Metal Fabrications"),
    ("05", "05 51 00", "Metal Stairs"),
    ("05", "05 52 00", "Metal Railings"),
    ("06", "06 10 00", "Rough Carpentry"),
    ("06", "06 11 00", "Wood Framing"),
    ("06", "06 16 00", "Sheathing"),
    ("06", "06 20 00", "Finish Carpentry"),
    ("06", "06 22 00", "Millwork"),
    ("06", "06 40 00", "Architectural Woodwork"),
    ("06", "06 41 00", "Architectural Wood Casework"),
    ("07", "07 10 00", "Dampproofing and Waterproofing"),
    ("07", "07 20 00", "Thermal Protection"),
    ("07", "07 21 00", "Thermal Insulation"),
    ("07", "07 30 00", "Steep Slope Roofing"),
    ("07", "07 31 00", "Shingles and Shakes"),
    ("07", "07 50 00", "Membrane Roofing"),
    ("07", "07 60 00", "Flashing and Sheet Metal"),
    ("07", "07 90 00", "Joint Protection"),
    ("07", "07 92 00", "Joint Sealants"),
    ("08", "08 10 00", "Doors and Frames"),
    ("08", "08 11 00", "Metal Doors and Frames"),
    ("08", "08 14 00", "Wood Doors"),
    ("08", "08 30 00", "Specialty Doors and Frames"),
    ("08", "08 33 00", "Coiling Doors and Grilles"),
    ("08", "08 36 00", "Panel Doors"),
    ("08", "08 50 00", "Windows"),
    ("08", "08 51 00", "Metal Windows"),
    ("08", "08 54 00", "Composite Windows"),
    ("08", "08 71 00", "Door Hardware"),
    ("08", "08 80 00", "Glazing"),
    ("09", "09 20 00", "Plaster and Gypsum Board"),
    ("09", "09 21 00", "Plaster and Gypsum Board Assemblies"),
    ("09", "09 22 00", "Supports for Plaster and Gypsum Board"),
    ("09", "09 29 00", "Gypsum Board"),
    ("09", "09 30 00", "Tiling"),
    ("09", "09 50 00", "Ceilings"),
    ("09", "09 51 00", "Acoustical Ceilings"),
    ("09", "09 60 00", "Flooring"),
    ("09", "09 64 00", "Wood Flooring"),
    ("09", "09 65 00", "Resilient Flooring"),
    ("09", "09 68 00", "Carpeting"),
    ("09", "09 90 00", "Painting and Coating"),
    ("09", "09 91 00", "Painting"),
    ("10", "10 10 00", "Information Specialties"),
    ("10", "10 14 00", "Signage"),
    ("10", "10 21 00", "Compartments and Cubicles"),
    ("10", "10 28 00", "Toilet, Bath, and Laundry Accessories"),
    ("10", "10 44 00", "Fire Protection Specialties"),
    ("11", "11 30 00", "Residential Equipment"),
    ("11", "11 31 00", "Residential Appliances"),
    ("11", "11 40 00", "Foodservice Equipment"),
    ("12", "12 20 00", "Window Treatments"),
    ("12", "12 30 00", "Casework"),
    ("12", "12 35 00", "Specialty Casework"),
    ("12", "12 36 00", "Countertops"),
    ("21", "21 10 00", "Water-Based Fire-Suppression Systems"),
    ("21", "21 13 00", "Fire-Suppression Sprinkler Systems"),
    ("22", "22 05 00", "Common Work Results for Plumbing"),
    ("22", "22 10 00", "Plumbing Piping and Pumps"),
    ("22", "22 11 00", "Facility Water Distribution"),
    ("22", "22 13 00", "Facility Sanitary Sewerage"),
    ("22", "22 30 00", "Plumbing Equipment"),
    ("22", "22 40 00", "Plumbing Fixtures"),
    ("22", "22 42 00", "Commercial Plumbing Fixtures"),
    ("23", "23 05 00", "Common Work Results for HVAC"),
    ("23", "23 07 00", "HVAC Insulation"),
    ("23", "23 09 00", "Instrumentation and Control for HVAC"),
    ("23", "23 20 00", "HVAC Piping and Pumps"),
    ("23", "23 30 00", "HVAC Air Distribution"),
    ("23", "23 31 00", "HVAC Ducts and Casings"),
    ("23", "23 34 00", "HVAC Fans"),
    ("23", "23 50 00", "Central Heating Equipment"),
    ("23", "23 60 00", "Central Cooling Equipment"),
    ("23", "23 80 00", "Decentralized HVAC Equipment"),
    ("26", "26 05 00", "Common Work Results for Electrical"),
    ("26", "26 09 00", "Instrumentation and Control for Electrical"),
    ("26", "26 20 00", "Low-Voltage Electrical Transmission"),
    ("26", "26 22 00", "Low-Voltage Transformers"),
    ("26", "26 24 00", "Switchboards and Panelboards"),
    ("26", "26 27 00", "Low-Voltage Distribution Equipment"),
    ("26", "26 28 00", "Low-Voltage Circuit Protective Devices"),
    ("26", "26 29 00", "Low-Voltage Controllers"),
    ("26", "26 50 00", "Lighting"),
    ("26", "26 51 00", "Interior Lighting"),
    ("26", "26 56 00", "Exterior Lighting"),
    ("27", "27 10 00", "Structured Cabling"),
    ("27", "27 11 00", "Communications Equipment Room Fittings"),
    ("27", "27 15 00", "Communications Horizontal Cabling"),
    ("28", "28 10 00", "Electronic Access Control and Intrusion Detection"),
    ("28", "28 30 00", "Electronic Detection and Alarm"),
    ("28", "28 31 00", "Fire Detection and Alarm"),
    ("31", "31 10 00", "Site Clearing"),
    ("31", "31 20 00", "Earth Moving"),
    ("31", "31 22 00", "Grading"),
    ("31", "31 23 00", "Excavation and Fill"),
    ("31", "31 25 00", "Erosion and Sedimentation Controls"),
    ("31", "31 60 00", "Special Foundations and Load-Bearing Elements"),
    ("32", "32 10 00", "Bases, Ballasts, and Paving"),
    ("32", "32 12 00", "Flexible Paving"),
    ("32", "32 13 00", "Rigid Paving"),
    ("32", "32 14 00", "Unit Paving"),
    ("32", "32 16 00", "Curbs and Gutters"),
    ("32", "32 17 00", "Paving Specialties"),
    ("32", "32 30 00", "Site Improvements"),
    ("32", "32 31 00", "Fences and Gates"),
    ("32", "32 32 00", "Retaining Walls"),
    ("32", "32 80 00", "Irrigation"),
    ("32", "32 90 00", "Planting"),
    ("32", "32 93 00", "Plants"),
    ("33", "33 10 00", "Water Utilities"),
    ("33", "33 30 00", "Sanitary Sewerage"),
    ("33", "33 40 00", "Storm Drainage"),
    ("33", "33 70 00", "Electrical Utilities"),
    ("33", "33 71 00", "Electrical Utility Transmission and Distribution"),
]


def division_code(division: str) -> str:
    return f"{division} 00 00"


def default_cost_codes() -> list[dict]:
    """Rows for every default division and section."""
    rows = [
        {
            "code": division_code(division),
            "division": division,
            "name": name,
            "parent_code": None,
            "level": 1,
            "is_default": True,
        }
        for division, name in CSI_DIVISIONS
    ]
    rows.extend(
        {
            "code": code,
            "division": division,
            "name": name,
            "parent_code": division_code(division),
            "level": 2,
            "is_default": True,
        }
        for division, code, name in CSI_SECTIONS
    )
    return rows


def seed_cost_codes() -> int:
    """Insert the default codes that are not stored yet. Returns how many were added."""
    db = get_supabase()
    existing = execute(
        db.table(COST_CODE_TABLE).select("code").eq("is_default", True)
    )
    stored = {row["code"] for row in existing.data or []}

    missing = [row for row in default_cost_codes() if row["code"] not in stored]
    if not missing:
        logger.info(f"Default cost codes already present ({len(stored)}), nothing to seed")
        return 0

    execute(db.table(COST_CODE_TABLE).insert(missing))
    logger.info(f"Seeded {len(missing)} default cost codes")
    return len(missing)


if __name__ == "__main__":
    seed_cost_codes()

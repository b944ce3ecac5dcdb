"""Spreadsheet column labels of examiner records, shared by import and export."""
import re

# (column label, record field) in sheet order
EXAMINER_COLUMNS: list[tuple[str, str]] = [
    ("SL", "serial"),
    ("Nick Name", "nick_name"),
    ("Status", "review_status"),
    ("T-PIN", "t_pin"),
    ("Inst.", "inst"),
    ("Dept.", "dept"),
    ("HSC Batch", "hsc_batch"),
    ("Rm", "reviewer_note"),
    ("Remarked By", "reviewed_by"),
    ("Mobile Number", "mobile_number"),
    ("Alternate", "alternate_mobile"),
    ("Mobile Banking Number", "mobile_banking_number"),
    ("Payment Method", "payment_method"),
    ("Mobile Banking Account Owner", "mobile_banking_owner"),
    ("Mobile Banking Number Confirmed By", "mobile_banking_confirmed_by"),
    ("Running Program", "running_program"),
    ("Previous Program", "previous_program"),
    ("Physically Scripts Checking Subject", "physically_check_subjects"),
    ("Online Subject Permission", "online_subject_permission"),
    ("TIN Given Date / TIN PDF Link", "tin_date_link"),
    ("TIN Number", "tin_number"),
    ("E-mail", "email"),
    ("Teams/Skype ID", "teams_skype_id"),
    ("Facebook ID", "facebook_id"),
    ("ID (Old)", "old_id"),
    ("Admission Position", "admission_position"),
    ("Admission Unit", "admission_unit"),
    ("HSC Roll", "hsc_roll"),
    ("HSC Reg.", "hsc_reg"),
    ("HSC Board", "hsc_board"),
    ("HSC GPA", "hsc_gpa"),
    ("Medium of education upto HSC Level", "medium_hsc"),
    ("Which way do you want to see the scripts?", "script_check_method"),
    ("Subject 1", "subject1"),
    ("Subject 2", "subject2"),
    ("Subject 3", "subject3"),
    ("Subject 4", "subject4"),
    ("Subject 5", "subject5"),
    ("Version Interested", "version_interested"),
    ("Udvash Unmesh Roll / Registration", "udvash_roll"),
    ("Participated Programmes in Udvash Unmesh", "participated_programs"),
    ("Branch", "branch"),
    ("Full Name", "full_name"),
    ("বাংলায় সম্পূর্ণ নাম", "full_name_bn"),
    ("Religion", "religion"),
    ("Gender", "gender"),
    ("Date of Birth", "dob"),
    ("Blood Donate", "blood_donate"),
    ("Blood Group", "blood_group"),
    ("Last Update Date", "last_updated"),
    ("College Name", "college_name"),
    ("Father's Name", "father_name"),
    ("Father's Occupation", "father_occupation"),
    ("Father's Designation", "father_designation"),
    ("Father's Mobile", "father_mobile"),
    ("Mother's Name", "mother_name"),
    ("Mother's Occupation", "mother_occupation"),
    ("Mother's Mobile", "mother_mobile"),
    ("NID No.", "nid_no"),
    ("Present Area", "present_area"),
    ("Home District", "home_district"),
    ("English(%)", "english_marks"),
    ("English Set", "english_set"),
    ("English Exam Date", "english_date"),
    ("Bangla(%)", "bangla_marks"),
    ("Bangla Set", "bangla_set"),
    ("Bangla Exam Date", "bangla_date"),
    ("Physics(%)", "physics_marks"),
    ("Physics Set", "physics_set"),
    ("Physics Exam Date", "physics_date"),
    ("Chemistry (%)", "chemistry_marks"),
    ("Chemistry Set", "chemistry_set"),
    ("Chemistry Exam Date", "chemistry_date"),
    ("Math (%)", "math_marks"),
    ("Math Set", "math_set"),
    ("Math Exam Date", "math_date"),
    ("Biology (%)", "biology_marks"),
    ("Biology Set", "biology_set"),
    ("Biology Exam Date", "biology_date"),
    ("ICT(%)", "ict_marks"),
    ("ICT Set", "ict_set"),
    ("ICT Exam Date", "ict_date"),
    ("Training Report", "training_report"),
    ("Training Date", "training_date"),
    ("Form Fill Up Campus", "form_fill_up_campus"),
    ("ID Checked?", "id_checked"),
    ("Entry By", "entry_by"),
    ("Form Fill Up Date", "form_fill_up_date"),
    ("In Which Campus You Want To Check Scripts physically?", "check_scripts_campus"),
    ("Shift (Max 2)", "check_scripts_shift"),
    ("Reference", "reference"),
    ("Selected Subject", "selected_subject"),
    ("RM 4 Comment", "rm4_comment"),
    ("Photo", "photo_url"),
    ("Document", "document_link"),
]

# Alternative headers found in older sheets
HEADER_ALIASES: dict[str, str] = {
    "Last DateDate": "last_updated",
    "Docoment": "document_link",
    "In which Shift do you want to check the scripts? (Maximum 2 Shifts can be selected)": "check_scripts_shift",
}


def normalize_header(header: str) -> str:
    """Collapse newlines and repeated whitespace, trim, and ignore case."""
    return re.sub(r"\s+", " ", str(header)).strip().casefold()


HEADER_TO_FIELD: dict[str, str] = {
    normalize_header(label): field for label, field in [*EXAMINER_COLUMNS, *HEADER_ALIASES.items()]
}


def field_for_header(header: str) -> str | None:
    """Record field for a sheet header, or None for unknown columns."""
    normalized = normalize_header(header)
    if normalized in HEADER_TO_FIELD:
        return HEADER_TO_FIELD[normalized]
    # Long shift question headers carry trailing instructions
    if normalized.startswith("in which shift do you want to check the scripts"):
        return "check_scripts_shift"
    return None

"""
Configuration for the deterministic CV-to-job ATS scorer.
Adjust weights and parameters here.

Changing WEIGHTS or IMPACT_TARGETS changes every historical score, so treat
them as part of the scoring contract.
"""

# Dimension weights (must sum to 1.0)
WEIGHTS = {
    "hard_skills": 0.40,
    "soft_skills": 0.10,
    "experience": 0.25,
    "impact": 0.15,
    "education": 0.10,
}

# Impact normalization targets: reaching both gives full impact credit
IMPACT_TARGETS = {
    "action_verbs": 5,
    "quantified_results": 3,
}

# Share of the impact dimension given to each signal
IMPACT_SPLIT = {
    "action_verbs": 0.5,
    "quantified_results": 0.5,
}

# Maximum overall score
MAX_SCORE = 100

# Free-text education labels understood by EducationLevel.from_label.
# Keys are lower-cased and stripped of punctuation before lookup.
EDUCATION_LEVEL_ALIASES = {
    "none": "NONE",
    "any": "NONE",
    "n/a": "NONE",
    "not specified": "NONE",
    "high school": "HIGH_SCHOOL",
    "highschool": "HIGH_SCHOOL",
    "high school diploma": "HIGH_SCHOOL",
    "secondary": "HIGH_SCHOOL",
    "ged": "HIGH_SCHOOL",
    "bachelors": "BACHELORS",
    "bachelor": "BACHELORS",
    "bachelors degree": "BACHELORS",
    "bachelor degree": "BACHELORS",
    "ba": "BACHELORS",
    "bs": "BACHELORS",
    "bsc": "BACHELORS",
    "be": "BACHELORS",
    "btech": "BACHELORS",
    "undergraduate": "BACHELORS",
    "masters": "MASTERS",
    "master": "MASTERS",
    "masters degree": "MASTERS",
    "master degree": "MASTERS",
    "ma": "MASTERS",
    "ms": "MASTERS",
    "msc": "MASTERS",
    "mba": "MASTERS",
    "mtech": "MASTERS",
    "postgraduate": "MASTERS",
    "phd": "PHD",
    "doctorate": "PHD",
    "doctoral": "PHD",
    "dphil": "PHD",
}

# Display labels for education levels (used in prompts and breakdown evidence)
EDUCATION_LEVEL_LABELS = {
    "NONE": "None",
    "HIGH_SCHOOL": "High School",
    "BACHELORS": "Bachelors",
    "MASTERS": "Masters",
    "PHD": "PhD",
}

# LLM configuration
LLM_CONFIG = {
    "model": "gpt-4o",  # Default model
    "extraction_temperature": 0,  # Fact extraction must be as repeatable as possible
    "feedback_temperature": 0.6,  # Recruiter commentary is advisory, not scored
    "rewrite_temperature": 0.7,  # Bullet point rewrites favour variety
    "timeout_seconds": 60,
}

# How many missing hard skills are handed to the feedback prompt
FEEDBACK_MISSING_SKILLS_LIMIT = 5

# Caller-side bound on the best-effort scan write
PERSIST_TIMEOUT_SECONDS = 15

# Scan history
SCANS_COLLECTION = "atsScans"
JOB_TITLE_SNIPPET_LENGTH = 100
UNTITLED_JOB = "Untitled Job"

# Progress labels shown while an analysis runs
PROGRESS_LABELS = {
    "IDLE": "Waiting to start.",
    "EXTRACTING_FACTS": "Step 1/4: Analyzing your CV and job description...",
    "SCORING": "Step 2/4: Calculating deterministic match score...",
    "GENERATING_FEEDBACK": "Step 3/4: Generating recruiter feedback...",
    "PERSISTING": "Step 4/4: Saving scan...",
    "DONE": "Analysis complete.",
    "FAILED": "Analysis failed.",
}

# Longest raw oracle excerpt written to debug logs
LOG_EXCERPT_CHARS = 500

"""General API routes: health, version and lookup data for the UI."""

import os
import subprocess
from datetime import datetime

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from routine_sheets_api.models import DaysResponse, GroupColorResponse
from routine_sheets_api.parsers.models import DAYS
from routine_sheets_api.services.group_colors import color_for

# Build timestamp - set at module load time
BUILD_TIMESTAMP = datetime.now().isoformat()


def get_git_info():
    """Get git commit hash and timestamp if available."""
    try:
        result = subprocess.run(
            ["git", "log", "-1", "--format=%H|%ci", "--date=iso"],
            cwd=os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
            capture_output=True,
            text=True,
            timeout=2,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode == 0 and result.stdout.strip():
        commit, date = result.stdout.strip().split("|", 1)
        return {
            "commit": commit,
            "commit_short": commit[:7],
            "commit_date": date,
        }
    return None


GIT_INFO = get_git_info()

router = APIRouter()


# ---------------------------------------------------------------------------
# Version / health
# ---------------------------------------------------------------------------


@router.get("/version")
async def get_version():
    """Get API version and build information."""
    version_info = {
        "service": "routine-sheets-api",
        "build_timestamp": BUILD_TIMESTAMP,
        "build_date": BUILD_TIMESTAMP,
    }
    if GIT_INFO:
        version_info.update(
            {
                "git_commit": GIT_INFO["commit"],
                "git_commit_short": GIT_INFO["commit_short"],
                "git_commit_date": GIT_INFO["commit_date"],
            }
        )
    return JSONResponse(version_info)


@router.get("/health")
def health():
    """Health check endpoint."""
    return {"ok": True}


# ---------------------------------------------------------------------------
# Lookup data
# ---------------------------------------------------------------------------


@router.get("/days", response_model=DaysResponse)
def list_days():
    """Valid day names, Monday first."""
    return DaysResponse(days=list(DAYS))


@router.get("/muscle-groups/colors", response_model=GroupColorResponse)
def muscle_group_color(name: str = Query(..., description="Muscle group name")):
    """Color token for a muscle group; unknown groups get the neutral color."""
    color = color_for(name)
    return GroupColorResponse(name=name, token=color.token, fill=color.fill, badge=color.badge)

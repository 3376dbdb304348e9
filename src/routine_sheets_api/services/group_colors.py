"""Muscle group color lookup shared by the sheet writer and UI badges."""
from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class GroupColor:
    """Color token for a muscle group."""
    token: str
    fill: str  # RGB hex used as the spreadsheet fill
    badge: str  # CSS classes used by the UI badge


NEUTRAL = GroupColor("gray", "B2C6D5", "bg-gray-100 text-gray-800 border-gray-200")

GROUP_COLORS: Dict[str, GroupColor] = {
    "pecho": GroupColor("red", "E43636", "bg-red-100 text-red-800 border-red-200"),
    "espalda": GroupColor("blue", "0D5EA6", "bg-blue-100 text-blue-800 border-blue-200"),
    "piernas": GroupColor("teal", "239BA7", "bg-teal-100 text-teal-800 border-teal-200"),
    "hombros": GroupColor("yellow", "EAA64D", "bg-yellow-100 text-yellow-800 border-yellow-200"),
    "brazos": GroupColor("purple", "725CAD", "bg-purple-100 text-purple-800 border-purple-200"),
    "abdomen": GroupColor("pink", "DB8DD0", "bg-pink-100 text-pink-800 border-pink-200"),
}


def color_for(group_name: str) -> GroupColor:
    """Color for a muscle group name (case-insensitive); unknown names get NEUTRAL."""
    return GROUP_COLORS.get((group_name or "").strip().lower(), NEUTRAL)

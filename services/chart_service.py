import math
from typing import Dict, Iterable, List, Mapping, Optional

from models.category import CATEGORY_COLORS, EXPENSE_CATEGORIES


class ChartService:
    def __init__(self, center_x: float = 100, center_y: float = 100, radius: float = 90,
                 colors: Optional[Mapping[str, str]] = None):
        # Geometry of the pie inside a 200x200 viewBox
        self.center_x = center_x
        self.center_y = center_y
        self.radius = radius
        self.colors = dict(colors or CATEGORY_COLORS)
        self.start_angle = -90  # 12 o'clock
        self.background = '#374151'

    def balance(self, monthly_budget: float, transactions: Iterable[Dict]) -> float:
        """
        Remaining money: the monthly budget plus the signed sum of all
        transactions (expenses are negative, income positive)
        """
        return monthly_budget + sum(t['amount'] for t in transactions)

    @staticmethod
    def balance_class(balance: float) -> str:
        if balance > 0:
            return 'positive'
        if balance < 0:
            return 'negative'
        return 'zero'

    def pie_slices(self, allocation) -> List[Dict]:
        """
        Convert a category -> percentage mapping into SVG path data, one slice
        per category with a non-zero share, in the declared category order
        """
        shares = _as_mapping(allocation)
        cx, cy, r = self.center_x, self.center_y, self.radius
        current_angle = self.start_angle
        slices = []

        for category in EXPENSE_CATEGORIES:
            percentage = shares.get(category, 0)
            if percentage == 0:
                continue

            sweep = (percentage / 100) * 360
            start_angle = current_angle
            end_angle = current_angle + sweep
            current_angle = end_angle

            if percentage == 100:
                # A 360 degree wedge has identical end points, draw two half circles instead
                path = (
                    f"M {cx} {cy} m -{r} 0 "
                    f"a {r} {r} 0 1 0 {r * 2} 0 "
                    f"a {r} {r} 0 1 0 -{r * 2} 0"
                )
            else:
                x1, y1 = self._point(start_angle)
                x2, y2 = self._point(end_angle)
                large_arc_flag = 1 if sweep > 180 else 0
                path = ' '.join([
                    f"M {cx} {cy}",
                    f"L {x1} {y1}",
                    f"A {r} {r} 0 {large_arc_flag} 1 {x2} {y2}",
                    'Z',
                ])

            slices.append({
                'category': category,
                'path': path,
                'color': self.colors.get(category),
                'percentage': percentage,
                'sweep': sweep,
                'full_circle': percentage == 100,
            })

        return slices

    def legend(self, allocation, monthly_budget: float) -> List[Dict]:
        shares = _as_mapping(allocation)
        return [
            {
                'category': category,
                'color': self.colors.get(category),
                'percentage': shares.get(category, 0),
                'amount': round((shares.get(category, 0) / 100) * monthly_budget, 2),
            }
            for category in EXPENSE_CATEGORIES
        ]

    def render_svg(self, slices: List[Dict]) -> str:
        size = self.center_x * 2
        parts = [
            f'<svg width="{size}" height="{size}" viewBox="0 0 {size} {size}" xmlns="http://www.w3.org/2000/svg">',
            f'<circle cx="{self.center_x}" cy="{self.center_y}" r="{self.radius}" '
            f'fill="{self.background}" stroke="white" stroke-width="2"/>',
        ]
        for s in slices:
            parts.append(f'<path d="{s["path"]}" fill="{s["color"]}" stroke="white" stroke-width="2"/>')
        parts.append('</svg>')
        return '\n'.join(parts)

    def _point(self, angle_degrees: float):
        theta = math.radians(angle_degrees)
        return (
            self.center_x + self.radius * math.cos(theta),
            self.center_y + self.radius * math.sin(theta),
        )


def _as_mapping(allocation) -> Mapping[str, int]:
    if hasattr(allocation, 'as_dict'):
        return allocation.as_dict()
    return allocation

"""
Single-line solving: split the grid with one closed line

The player draws ONE closed line along cell edges (the grid border included)
without reusing an edge. Two cells stay in the same region unless the line
runs between them, and every region holding pips must hold the same amount.

Every such line is the outline of a set of shaded cells: crossing the line
always swaps shaded and unshaded, so the line is exactly the set of edges
between a shaded cell and an unshaded cell or the outside. Regions are the
connected shaded and unshaded areas. Searching shadings instead of drawn
paths visits every line exactly once; a shading counts when its outline is
connected.
"""

import time
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .errors import SearchInvariantError
from .feasibility import FeasibilitySet, derive
from .grid import Grid
from .partition import Region, cuts_for_partition, evaluate_cuts

Edge = Tuple[int, int]  # Corner indices, lower first


@dataclass(frozen=True)
class DrawnLine:
    """A closed line and the regions it cuts the grid into"""
    shaded: Tuple[int, ...]
    edges: Tuple[Edge, ...]
    regions: Tuple[Region, ...]


@dataclass(frozen=True)
class LineSolution:
    """Witness line for one solvable total"""
    total: int
    line: DrawnLine


# -----------------------------------------------------------------------------
# Grid corners and edges
# -----------------------------------------------------------------------------
def vertex_index(grid: Grid, row: int, col: int) -> int:
    """Index of the corner at (row, col); corners span (height+1) x (width+1)"""
    if not (0 <= row <= grid.height and 0 <= col <= grid.width):
        raise IndexError(f"Corner ({row},{col}) is outside a {grid.width}x{grid.height} grid")
    return row * (grid.width + 1) + col


def cell_sides(grid: Grid, cell: int) -> List[Tuple[Optional[int], Edge]]:
    """(cell across the side, or None at the border; side edge) for the 4 sides"""
    row, col = grid.coords(cell)
    top_left = vertex_index(grid, row, col)
    bottom_left = vertex_index(grid, row + 1, col)
    return [
        (cell - grid.width if row > 0 else None, (top_left, top_left + 1)),
        (cell + grid.width if row < grid.height - 1 else None, (bottom_left, bottom_left + 1)),
        (cell - 1 if col > 0 else None, (top_left, bottom_left)),
        (cell + 1 if col < grid.width - 1 else None, (top_left + 1, bottom_left + 1)),
    ]


def outline(grid: Grid, shaded: Iterable[int]) -> List[Edge]:
    """Edges between a shaded cell and an unshaded cell or the outside"""
    inside = set(shaded)
    edges = set()
    for cell in inside:
        for across, edge in cell_sides(grid, cell):
            if across not in inside:
                edges.add(edge)
    return sorted(edges)


def is_single_line(edges: Iterable[Sequence[int]]) -> bool:
    """
    True if `edges` can be drawn as one closed line that never reuses an edge:
    the edges must be connected and meet an even number of times at every corner.
    """
    edge_set = {tuple(sorted(edge)) for edge in edges}
    if not edge_set:
        return False

    degree: Dict[int, int] = {}
    parent: Dict[int, int] = {}

    def find(v: int) -> int:
        while parent[v] != v:
            parent[v] = parent[parent[v]]
            v = parent[v]
        return v

    for a, b in edge_set:
        degree[a] = degree.get(a, 0) + 1
        degree[b] = degree.get(b, 0) + 1
        parent.setdefault(a, a)
        parent.setdefault(b, b)
        root_a, root_b = find(a), find(b)
        if root_a != root_b:
            parent[root_a] = root_b

    if any(d % 2 for d in degree.values()):
        return False
    return len({find(v) for v in parent}) == 1


def partition_line(grid: Grid, partition: Sequence[Iterable[int]]) -> Optional[List[Edge]]:
    """
    A single closed line that draws exactly this partition, or None.

    Neighbouring regions must get opposite shades, so the regions must be
    2-colourable; either colouring may be the shaded side.
    """
    regions = [tuple(region) for region in partition]
    region_of = {cell: i for i, region in enumerate(regions) for cell in region}
    touching: Dict[int, set] = {i: set() for i in range(len(regions))}
    for a, b in cuts_for_partition(grid, regions):
        touching[region_of[a]].add(region_of[b])
        touching[region_of[b]].add(region_of[a])

    colour = {0: 0}
    queue = [0]
    while queue:
        i = queue.pop()
        for j in touching[i]:
            if j not in colour:
                colour[j] = 1 - colour[i]
                queue.append(j)
            elif colour[j] == colour[i]:
                return None

    for side in (1, 0):
        shaded = [cell for i, region in enumerate(regions) if colour[i] == side for cell in region]
        edges = outline(grid, shaded)
        if is_single_line(edges):
            return edges
    return None


# -----------------------------------------------------------------------------
# Solver
# -----------------------------------------------------------------------------
class LineSolver:
    def __init__(self, grid: Grid, verbose: bool = False, timeout_seconds: Optional[float] = None):
        self.grid = grid
        self.feasibility: FeasibilitySet = derive(grid)
        self.verbose = verbose
        self.timeout_seconds = timeout_seconds
        self._deadline: Optional[float] = None
        self.stats = {
            'nodes': 0,
            'prunes': 0,
            'shadings': 0,
            'broken_lines': 0,
            'lines': 0,
            'totals_tried': 0,
            'timed_out': False,
            'elapsed': 0.0,
        }

    def solve(self) -> List[LineSolution]:
        """Find one witness line for every solvable total, ascending"""
        start = time.time()
        if self.timeout_seconds is not None:
            self._deadline = start + self.timeout_seconds

        if self.verbose:
            print(f"Drawing lines on {self.grid}")
            print(f"Feasible totals: {self.feasibility.totals()}")

        results: List[LineSolution] = []
        for total in self.feasibility.totals():
            if self._timed_out():
                break
            self.stats['totals_tried'] += 1
            line = next(self.lines(total), None)
            if self.verbose:
                status = "✓" if line is not None else "✗"
                print(f"  {status} total {total}")
            if line is not None:
                results.append(LineSolution(total=total, line=line))

        self.stats['elapsed'] = time.time() - start
        if self.verbose:
            self._print_stats()
        return results

    def solution_totals(self) -> List[int]:
        """Totals the game accepts: some single line splits the grid into equal regions"""
        return [s.total for s in self.solve()]

    def lines(self, total: int) -> Iterator[DrawnLine]:
        """Every single closed line whose regions all hold `total` or zero pips"""
        if total not in self.feasibility:
            raise ValueError(f"{total} is not a feasible total for {self.grid.to_layout()!r}")
        return self._shadings(total)

    def _shadings(self, total: int) -> Iterator[DrawnLine]:
        # Cells are shaded in row-major order. Regions (edge-connected areas of
        # one shade) are tracked by label within the last row's worth of cells;
        # a region is checked against `total` as soon as it can no longer grow.
        #
        # The outline is one connected line exactly when the shaded cells form
        # a single corner-connected area and every corner-connected unshaded
        # area reaches the border. Those areas get their own labels and are
        # checked the same way.
        grid = self.grid
        n, width, height = grid.num_cells, grid.width, grid.height
        pips = grid.pips
        shade = [0] * n
        label = [0] * n
        sums: Dict[int, int] = {}
        area = [0] * n
        reaches_border: Dict[int, bool] = {}
        on_border = [
            row in (0, height - 1) or col in (0, width - 1)
            for row, col in (grid.coords(c) for c in range(n))
        ]
        sealed = [False]  # the shaded area has closed; no more shaded cells

        def is_live(cell: int, assigned: int) -> bool:
            below = cell + width
            if assigned <= below < n:
                return True
            return cell + 1 == assigned and cell % width != width - 1

        def is_live_area(cell: int, assigned: int) -> bool:
            col = cell % width
            later = [cell + width]
            if col < width - 1:
                later += [cell + 1, cell + width + 1]
            if col > 0:
                later.append(cell + width - 1)
            return any(assigned <= c < n for c in later)

        def closes_badly(lab: int, assigned: int) -> bool:
            for cell in range(max(0, assigned - width), assigned):
                if label[cell] == lab and is_live(cell, assigned):
                    return False
            return sums[lab] not in (0, total)

        def area_closed(lab: int, assigned: int) -> bool:
            for cell in range(max(0, assigned - width - 1), assigned):
                if area[cell] == lab and is_live_area(cell, assigned):
                    return False
            return True

        def assign(k: int) -> Iterator[DrawnLine]:
            if k == n:
                yield from self._finish(shade, total)
                return
            row, col = divmod(k, width)
            up = k - width if row > 0 else None
            left = k - 1 if col > 0 else None
            corners = [c for c in (
                k - width - 1 if row > 0 and col > 0 else None,
                up,
                k - width + 1 if row > 0 and col < width - 1 else None,
                left,
            ) if c is not None]

            for colour in (1, 0):
                if self._timed_out():
                    return
                self.stats['nodes'] += 1
                if colour and sealed[0]:
                    self.stats['prunes'] += 1
                    continue
                shade[k] = colour

                # Edge-connected regions and their pip sums
                joined = sorted({label[c] for c in (up, left) if c is not None and shade[c] == colour})
                relabelled: List[int] = []
                old_sum = None
                if not joined:
                    lab = k
                    sums[lab] = pips[k]
                else:
                    lab = joined[0]
                    old_sum = sums[lab]
                    sums[lab] += pips[k]
                    if len(joined) == 2:
                        other = joined[1]
                        sums[lab] += sums[other]
                        for c in range(max(0, k - width), k):
                            if label[c] == other:
                                label[c] = lab
                                relabelled.append(c)
                label[k] = lab

                # Corner-connected areas and whether they reach the border
                joined_areas = sorted({area[c] for c in corners if shade[c] == colour})
                moved: List[Tuple[int, int]] = []
                old_reach = None
                if not joined_areas:
                    area_lab = k
                    reaches_border[area_lab] = on_border[k]
                else:
                    area_lab = joined_areas[0]
                    old_reach = reaches_border[area_lab]
                    reaches_border[area_lab] = on_border[k] or any(reaches_border[a] for a in joined_areas)
                    for c in range(max(0, k - width - 1), k):
                        if area[c] in joined_areas[1:]:
                            moved.append((c, area[c]))
                            area[c] = area_lab
                area[k] = area_lab

                was_sealed = sealed[0]
                ok = sums[lab] <= total
                if ok:
                    touched = {label[c] for c in (up, left) if c is not None}
                    touched.add(lab)
                    ok = not any(closes_badly(t, k + 1) for t in touched)
                if ok:
                    for a in sorted({area[c] for c in corners} | {area_lab}):
                        owner = next(c for c in range(max(0, k - width - 1), k + 1) if area[c] == a)
                        if not area_closed(a, k + 1):
                            continue
                        if not shade[owner]:
                            if not reaches_border[a]:
                                ok = False
                                break
                        elif sealed[0]:
                            ok = False
                            break
                        else:
                            sealed[0] = True

                if ok:
                    yield from assign(k + 1)
                else:
                    self.stats['prunes'] += 1

                sealed[0] = was_sealed
                for c, a in moved:
                    area[c] = a
                if old_reach is not None:
                    reaches_border[area_lab] = old_reach
                for c in relabelled:
                    label[c] = other
                if old_sum is not None:
                    sums[lab] = old_sum

        return assign(0)

    def _finish(self, shade: List[int], total: int) -> Iterator[DrawnLine]:
        shaded = tuple(cell for cell, s in enumerate(shade) if s)
        self.stats['shadings'] += 1
        edges = outline(self.grid, shaded)
        if not is_single_line(edges):
            self.stats['broken_lines'] += 1
            return

        cuts = [(a, b) for a in shaded for b in self.grid.neighbours[a] if not shade[b]]
        check = evaluate_cuts(self.grid, cuts)
        if not check.is_correct or check.pip_group_size != total:
            raise SearchInvariantError(
                f"Shading {list(shaded)} passed the region checks but splits into "
                f"{[r.pip_sum for r in check.regions]}"
            )
        self.stats['lines'] += 1
        yield DrawnLine(shaded=shaded, edges=tuple(edges), regions=tuple(r.cells for r in check.regions))

    def _timed_out(self) -> bool:
        if self._deadline is not None and time.time() >= self._deadline:
            self.stats['timed_out'] = True
            return True
        return False

    def _print_stats(self) -> None:
        print("\nLine Statistics:")
        print(f"  Totals tried: {self.stats['totals_tried']}")
        print(f"  Nodes: {self.stats['nodes']}")
        print(f"  Prunes: {self.stats['prunes']}")
        print(f"  Shadings checked: {self.stats['shadings']} ({self.stats['broken_lines']} not one line)")
        print(f"  Lines found: {self.stats['lines']}")
        if self.stats['timed_out']:
            print("  Stopped early: timeout")
        print(f"  Elapsed: {self.stats['elapsed']:.3f}s")

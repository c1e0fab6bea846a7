"""
Subset selection over a ConflictGraph.

Finds the feasible set of candidates with the largest total fee. Components
of the graph are independent, so each is solved on its own:

- components of at most ``exact_limit`` candidates are solved exactly by
  depth-first branch-and-bound. Work is exponential in the component size in
  the worst case, which is what the limit caps. The search recurses once per
  candidate, so ``exact_limit`` itself may not exceed ``MAX_EXACT_LIMIT``.
- larger components use a greedy-by-fee pass, compared with the in-order
  (first valid wins) selection of the same component; the better one is kept,
  so the result never falls below what the sequential policy would commit.

Ties between equal-fee selections go to the one whose membership vector over
candidate indices is lexicographically greatest, i.e. earlier candidates are
preferred. The exact search visits leaves in exactly that order.
"""

from typing import List, Set
import logging

from .conflicts import ConflictGraph

logger = logging.getLogger(__name__)

DEFAULT_EXACT_LIMIT = 20
MAX_EXACT_LIMIT = 64
EXHAUSTIVE_LIMIT = 16


def check_exact_limit(exact_limit: int) -> None:
    """
    Raises:
        ValueError: If exact_limit is outside [0, MAX_EXACT_LIMIT]
    """
    if not 0 <= exact_limit <= MAX_EXACT_LIMIT:
        raise ValueError(f"exact_limit must be in [0, {MAX_EXACT_LIMIT}], got {exact_limit}")


def select_max_fee(graph: ConflictGraph, exact_limit: int = DEFAULT_EXACT_LIMIT) -> List[int]:
    """
    Choose the fee-maximizing feasible subset of graph.

    Args:
        graph: Screened candidates and their relations
        exact_limit: Largest component solved exactly

    Returns:
        Selected candidate indices in ascending order

    Raises:
        ValueError: If exact_limit is negative or above MAX_EXACT_LIMIT
    """
    check_exact_limit(exact_limit)

    selected: List[int] = []
    for component in graph.components():
        if len(component) <= exact_limit:
            chosen = branch_and_bound(graph, component)
        else:
            greedy = greedy_by_fee(graph, component)
            ordered = in_order(graph, component)
            if graph.total_fee(set(greedy)) > graph.total_fee(set(ordered)):
                chosen = greedy
            else:
                chosen = ordered
            logger.info(
                "Component of %d candidates above exact limit %d, approximated with fee %d",
                len(component), exact_limit, graph.total_fee(set(chosen))
            )
        selected.extend(chosen)
    return sorted(selected)


def branch_and_bound(graph: ConflictGraph, component: List[int]) -> List[int]:
    """
    Exact maximum-fee feasible subset of one component.

    Candidates are decided in ascending index order, include-branch first.
    A candidate can be included only if no chosen candidate conflicts with it
    and all of its parents were included; the counters in ``blocked`` track
    both conditions. A branch is cut when its optimistic bound (current fee
    plus every still-includable remaining fee) cannot beat the best so far.
    """
    order = sorted(component)
    fees = [graph.nodes[i].fee for i in order]
    blocked = {i: 0 for i in order}
    chosen: List[int] = []
    best: List[int] = []
    best_fee = -1

    def bound(pos: int) -> int:
        return sum(fees[k] for k in range(pos, len(order)) if blocked[order[k]] == 0)

    def search(pos: int, fee: int) -> None:
        nonlocal best, best_fee
        if pos == len(order):
            if fee > best_fee:
                best = list(chosen)
                best_fee = fee
            return
        if fee + bound(pos) <= best_fee:
            return

        index = order[pos]
        node = graph.nodes[index]

        if blocked[index] == 0:
            chosen.append(index)
            for other in graph.neighbors(index):
                blocked[other] += 1
            search(pos + 1, fee + fees[pos])
            for other in graph.neighbors(index):
                blocked[other] -= 1
            chosen.pop()

        for child in node.children:
            blocked[child] += 1
        search(pos + 1, fee)
        for child in node.children:
            blocked[child] -= 1

    search(0, 0)
    return best


def greedy_by_fee(graph: ConflictGraph, component: List[int]) -> List[int]:
    """
    Approximate selection: highest fee first, ties by index.

    Repeats passes until nothing more fits, so a child passed over because its
    parent was not chosen yet gets another chance.
    """
    ranked = sorted(component, key=lambda i: (-graph.nodes[i].fee, i))
    chosen: Set[int] = set()
    changed = True
    while changed:
        changed = False
        for index in ranked:
            if index in chosen:
                continue
            if _fits(graph, index, chosen):
                chosen.add(index)
                changed = True
    return sorted(chosen)


def in_order(graph: ConflictGraph, component: List[int]) -> List[int]:
    """First valid wins, in candidate order."""
    chosen: Set[int] = set()
    for index in sorted(component):
        if _fits(graph, index, chosen):
            chosen.add(index)
    return sorted(chosen)


def exhaustive_search(graph: ConflictGraph, component: List[int]) -> List[int]:
    """
    Brute-force baseline over every subset of component.

    Not used by ``select_max_fee``. It applies the same tie-break as
    ``branch_and_bound`` by enumerating every subset, which makes it the
    reference result for verifying the exact search on small components.

    Raises:
        ValueError: If the component has more than EXHAUSTIVE_LIMIT candidates
    """
    if len(component) > EXHAUSTIVE_LIMIT:
        raise ValueError(f"Exhaustive search limited to {EXHAUSTIVE_LIMIT} candidates")

    order = sorted(component)
    best: List[int] = []
    best_key = None
    for mask in range(1 << len(order)):
        selection = {order[k] for k in range(len(order)) if mask >> k & 1}
        if not graph.is_feasible(selection):
            continue
        membership = tuple(1 if i in selection else 0 for i in order)
        key = (graph.total_fee(selection), membership)
        if best_key is None or key > best_key:
            best_key = key
            best = sorted(selection)
    return best


def _fits(graph: ConflictGraph, index: int, chosen: Set[int]) -> bool:
    return not (graph.neighbors(index) & chosen) and graph.nodes[index].parents <= chosen

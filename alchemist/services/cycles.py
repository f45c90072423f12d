"""Circular co-run detection.

Each active coRun rule links every pair of its tasks. The rule is a single
group, so an edge is never followed back through the rule it was entered by:
one rule over three tasks is not a cycle, while three two-task rules chaining
T1-T2, T2-T3 and T3-T1 are.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Dict, FrozenSet, Iterator, List, Optional, Sequence, Set, Tuple

from alchemist.domain.records import CIRCULAR_CORUN, CO_RUN, AnalysisSnapshot, Finding, Rule, finding

WHITE, GRAY, BLACK = 0, 1, 2

# neighbour task id, index of the rule that links them
Edge = Tuple[str, int]


def build_corun_graph(rules: Sequence[Rule]) -> "OrderedDict[str, List[Edge]]":
    """Adjacency list over task ids from active coRun rules, in rule order."""
    graph: "OrderedDict[str, List[Edge]]" = OrderedDict()
    for rule_index, rule in enumerate(rules):
        if not rule.active or rule.type != CO_RUN:
            continue
        tasks = rule.corun_tasks
        for task in tasks:
            graph.setdefault(task, [])
        for i, a in enumerate(tasks):
            for b in tasks[i + 1:]:
                graph[a].append((b, rule_index))
                graph[b].append((a, rule_index))
    return graph


def find_corun_cycles(rules: Sequence[Rule]) -> List[List[str]]:
    """
    Find co-run cycles with an iterative depth-first search.

    Colouring is shared across all start nodes so every task is expanded once;
    the path is tracked per branch. Cycles over the same task set are reported
    once.

    Returns:
        List of cyclic paths, each closed (first task repeated at the end)
    """
    graph = build_corun_graph(rules)
    colour: Dict[str, int] = {task: WHITE for task in graph}
    reported: Set[FrozenSet[str]] = set()
    cycles: List[List[str]] = []

    for start in graph:
        if colour[start] != WHITE:
            continue
        path: List[str] = [start]
        colour[start] = GRAY
        # frame: (task, rule it was entered through, neighbour iterator)
        stack: List[Tuple[str, Optional[int], Iterator[Edge]]] = [(start, None, iter(graph[start]))]

        while stack:
            task, entered_by, neighbours = stack[-1]
            advanced = False
            for neighbour, rule_index in neighbours:
                if rule_index == entered_by:
                    continue
                state = colour[neighbour]
                if state == GRAY:
                    cycle = path[path.index(neighbour):]
                    key = frozenset(cycle)
                    # two rules over the same pair are redundant, not circular
                    if len(cycle) >= 3 and key not in reported:
                        reported.add(key)
                        cycles.append(cycle + [neighbour])
                elif state == WHITE:
                    colour[neighbour] = GRAY
                    path.append(neighbour)
                    stack.append((neighbour, rule_index, iter(graph[neighbour])))
                    advanced = True
                    break
            if not advanced:
                colour[task] = BLACK
                path.pop()
                stack.pop()
    return cycles


def check_cycles(snapshot: AnalysisSnapshot) -> List[Finding]:
    rules = snapshot.rules
    findings: List[Finding] = []
    for cycle in find_corun_cycles(rules):
        members = set(cycle)
        rule_ids = [
            rule.id
            for rule in rules
            if rule.active and rule.type == CO_RUN and len(members & set(rule.corun_tasks)) >= 2
        ]
        findings.append(
            finding(
                CIRCULAR_CORUN,
                f"Circular co-run dependency: {' -> '.join(cycle)}",
                "Co-run rules",
                subject=",".join(rule_ids),
            )
        )
    return findings

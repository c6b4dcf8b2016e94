"""
Critical Path Method (CPM): backward pass and critical path.

Calculates:
- Backward pass: Latest Start (LS), Latest Finish (LF)
- Slack/Float: LS - ES
- Critical Path: the chain of zero-float tasks that drives the project end

Runs after engine.forward_pass has filled in ES/EF.
"""

from datetime import timedelta

from sitescheduler.logging_config import get_logger
from sitescheduler.services.network import Snapshot, TaskNode
from sitescheduler.services.precedence import backward_limit, forward_bound

logger = get_logger(__name__)


def backward_pass(snapshot: Snapshot, order: list[int]) -> None:
    """
    Fill in LS/LF for every task in order, walking it in reverse.

    The project end is the latest EF of any scheduled task. A task may not
    finish later than the project end, nor later than any successor allows.
    """
    nodes = snapshot.nodes
    project_end = max(nodes[idx].ef for idx in order)

    for idx in reversed(order):
        node = nodes[idx]
        lf = project_end

        for edge, succ_idx in node.outgoing:
            succ = nodes[succ_idx]
            if not succ.in_scope:
                continue
            lf = min(lf, backward_limit(edge, succ, node.span))

        node.lf = lf
        node.ls = lf - timedelta(days=node.span - 1)


def _is_binding(edge, pred: TaskNode, succ: TaskNode) -> bool:
    """True if this dependency is what actually sets the successor's start."""
    return forward_bound(edge, pred, succ.span) == succ.es


def critical_chain(snapshot: Snapshot, order: list[int]) -> list[str]:
    """
    Extract the critical path as an ordered list of task IDs.

    Starting from a zero-float task that finishes on the project end, walk
    back through binding dependencies whose predecessor also has zero float,
    until reaching a task with no such predecessor (the project-start end of
    the chain).

    Ties between equally critical chains are broken by the smallest task ID,
    both when choosing the final task and at every step backwards.
    """
    nodes = snapshot.nodes
    if not order:
        return []

    project_end = max(nodes[idx].ef for idx in order)
    critical = {idx for idx in order if nodes[idx].total_float <= 0}

    finishers = sorted(
        (nodes[idx].task_id, idx)
        for idx in critical
        if nodes[idx].ef == project_end
    )
    if not finishers:
        return []

    # A finisher that drives another critical task (FF/SF) is not the last link
    last_links = [
        (task_id, idx)
        for task_id, idx in finishers
        if not any(
            succ_idx in critical and _is_binding(edge, nodes[idx], nodes[succ_idx])
            for edge, succ_idx in nodes[idx].outgoing
        )
    ]
    finishers = last_links or finishers

    _, current = finishers[0]
    chain = [current]
    while True:
        node = nodes[current]
        drivers = sorted(
            (nodes[pred_idx].task_id, pred_idx)
            for edge, pred_idx in node.incoming
            if pred_idx in critical
            and _is_binding(edge, nodes[pred_idx], node)
        )
        if not drivers:
            break
        _, current = drivers[0]
        chain.append(current)

    chain.reverse()
    path = [nodes[idx].task_id for idx in chain]
    logger.debug(f"Critical path: {' -> '.join(path)}")
    return path


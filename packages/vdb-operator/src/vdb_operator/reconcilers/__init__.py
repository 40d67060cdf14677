"""
Reconcile actors and the pipeline that runs them.

- AgentReconciler: start the management agent on database members
- CreateDBReconciler: create_db strategy of the generic initializer
- ReviveDBReconciler: revive_db strategy of the generic initializer
- ReconcilePipeline: ordered actors over one PodFacts snapshot
- VerticaDBReconciler: per-event entry point
"""

from vdb_operator.reconcilers.agent import AgentReconciler
from vdb_operator.reconcilers.base import ReconcileActor
from vdb_operator.reconcilers.controller import DEFAULT_ACTORS, VerticaDBReconciler
from vdb_operator.reconcilers.create_db import CreateDBReconciler
from vdb_operator.reconcilers.init_db import DatabaseInitializer, GenericDatabaseInitializer
from vdb_operator.reconcilers.pipeline import ReconcilePipeline, run_actors
from vdb_operator.reconcilers.revive_db import ReviveDBReconciler

__all__ = [
    "AgentReconciler",
    "CreateDBReconciler",
    "DEFAULT_ACTORS",
    "DatabaseInitializer",
    "GenericDatabaseInitializer",
    "ReconcileActor",
    "ReconcilePipeline",
    "ReviveDBReconciler",
    "VerticaDBReconciler",
    "run_actors",
]

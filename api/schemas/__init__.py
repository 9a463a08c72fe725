"""
SmartBagan API Pydantic schemas.

Re-exports all schema classes:
    from api.schemas import Position, AnalyzeRequest, ...
"""

# Common
from .common import CamelModel, Position, CatchModel  # noqa: F401

# Optimization
from .optimization import (  # noqa: F401
    BaganModel,
    CandidateSiteModel,
    SafeZoneModel,
    IslandModel,
    ConfigOverrides,
    AnalyzeRequest,
    QuickCheckRequest,
    MoveAnalysisModel,
    CandidateSiteResponse,
    RecommendationModel,
    RouteStepModel,
    RouteSummaryModel,
    RoutePlanModel,
    SummaryModel,
    EstimatedTotalsModel,
    AnalyzeResponse,
    QuickCheckResponse,
    OptimizerConfigModel,
)

# Zones
from .zones import (  # noqa: F401
    ZoneCoordinates,
    ZoneSummaryModel,
    FactorScoreModel,
    PredictedCatchModel,
    ZoneRecommendationModel,
    ZoneRecommendationsResponse,
    PointScoreRequest,
    PointScoreResponse,
)

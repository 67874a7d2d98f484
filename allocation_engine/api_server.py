"""FastAPI server exposing the allocation engine.

Endpoints:
- POST /optimizer/covariance {symbols, matrix} -> stores the matrix, returns its id
- GET /optimizer/covariance/last -> id, symbols and upload time of the stored matrix
- POST /optimizer/run {method, expectedReturns, covarianceId or symbols+matrix, ...} -> allocation
- POST /portfolio/optimize -> same as /optimizer/run

Each app built by `create_app` owns its own `OptimizationService` (and so
its own covariance slot), which keeps tests isolated from one another.
"""
import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from .config import load_settings
from .errors import ComputationError, NotFoundError, ValidationError
from .service import OptimizationRequest, OptimizationService

logger = logging.getLogger(__name__)


class UploadCovarianceRequest(BaseModel):
    symbols: List[str]
    # cells are checked by the service, which rejects strings and booleans
    matrix: List[List[Any]]


class RiskLimits(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    max_weight: Optional[float] = Field(default=None, alias="maxWeight")


class OptimizeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    method: Optional[str] = None
    expected_returns: Optional[Union[List[Any], Dict[str, Any]]] = Field(default=None, alias="expectedReturns")
    covariance_id: Optional[str] = Field(default=None, alias="covarianceId")
    # allow passing the covariance inline instead of by id
    symbols: Optional[List[str]] = None
    matrix: Optional[List[List[Any]]] = None
    risk_aversion: Optional[Any] = Field(default=None, alias="riskAversion")
    risk_limits: Optional[RiskLimits] = Field(default=None, alias="riskLimits")

    def to_service_request(self) -> OptimizationRequest:
        return OptimizationRequest(
            method=self.method,
            expected_returns=self.expected_returns,
            covariance_id=self.covariance_id,
            symbols=self.symbols,
            matrix=self.matrix,
            risk_aversion=self.risk_aversion,
            max_weight=None if self.risk_limits is None else self.risk_limits.max_weight,
        )


def get_service(request: Request) -> OptimizationService:
    return request.app.state.service


def create_app(service: Optional[OptimizationService] = None) -> FastAPI:
    app = FastAPI(title="Portfolio Allocation Engine")
    app.state.service = service if service is not None else OptimizationService(settings=load_settings())

    @app.post('/optimizer/covariance')
    def upload_covariance(req: UploadCovarianceRequest, svc: OptimizationService = Depends(get_service)):
        try:
            record = svc.upload(req.symbols, req.matrix)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))
        return {'status': 'success', 'id': record.id, 'symbols': list(record.symbols), 'size': record.size}

    @app.get('/optimizer/covariance/last')
    def last_covariance(svc: OptimizationService = Depends(get_service)):
        record = svc.last_upload()
        if record is None:
            return {'status': 'success', 'data': None}
        return {'status': 'success', 'data': {'covarianceId': record.id, 'symbols': list(record.symbols),
                                              'uploadedAt': record.uploaded_at.isoformat()}}

    @app.post('/optimizer/run')
    @app.post('/portfolio/optimize')
    def optimize(req: OptimizeRequest, svc: OptimizationService = Depends(get_service)):
        try:
            result = svc.optimize(req.to_service_request())
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ComputationError as e:
            logger.error("Optimization failed: %s", e.cause)
            raise HTTPException(status_code=500, detail='Optimization failed')
        return result.to_dict()

    return app


# uvicorn allocation_engine.api_server:app
app = create_app()

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from tasklist.domain.task_models import Task, TaskCreate, TaskProgress, TaskValidationError
from tasklist.services.task_store import TaskStore

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def get_store(request: Request) -> TaskStore:
    # set by create_app
    return request.app.state.task_store


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(payload: TaskCreate, store: TaskStore = Depends(get_store)):
    try:
        return await store.add(payload.name, payload.description, payload.due_date, payload.priority)
    except TaskValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("", response_model=list[Task])
async def list_tasks(store: TaskStore = Depends(get_store)):
    return store.tasks


@router.get("/progress", response_model=TaskProgress)
async def get_progress(store: TaskStore = Depends(get_store)):
    return store.progress()


@router.get("/{task_id}", response_model=Task)
async def get_task(task_id: str, store: TaskStore = Depends(get_store)):
    task = store.get(task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.post("/{task_id}/toggle", response_model=Task)
async def toggle_task(task_id: str, store: TaskStore = Depends(get_store)):
    if not await store.toggle_complete(task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    # a delete may have landed after the toggle released the store
    task = store.get(task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, store: TaskStore = Depends(get_store)):
    if not await store.remove(task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""Document Handlers — document metadata commands and reads.

Invariants:
    - version starts at 1 and increments on every metadata update
"""

from pmflow.core import cache_keys as keys
from pmflow.core.requests import (
    CreateDocumentCommand, DeleteDocumentCommand, GetDocumentByIdQuery,
    GetDocumentsByProjectQuery, UpdateDocumentCommand,
)
from pmflow.core.result import Result, Success, not_found
from pmflow.models.document import Document
from pmflow.models.project import Project
from pmflow.schemas.project_items import DocumentDto
from pmflow.services.handler_support import (
    ScopedHandlers, enum_value, new_id, utcnow,
)


class DocumentHandlers(ScopedHandlers):
    async def create_document(self, request: CreateDocumentCommand) -> Result:
        if await self.repo(Project).get_by_id(request.project_id) is None:
            return not_found("Project", request.project_id)
        document = Document(
            id=new_id(),
            project_id=request.project_id,
            uploaded_by_id=request.uploaded_by_id,
            name=request.name.strip(),
            description=request.description,
            type=enum_value(request.type),
            file_path=request.file_path,
            file_size=request.file_size,
            content_type=request.content_type,
            version=1,
            created_at=utcnow(),
        )
        await self.repo(Document).add(document)
        await self.uow.save_changes()
        return Success(DocumentDto.model_validate(document))

    async def update_document(self, request: UpdateDocumentCommand) -> Result:
        documents = self.repo(Document)
        document = await documents.get_by_id(request.id)
        if document is None:
            return not_found("Document", request.id)
        document.name = request.name.strip()
        document.type = enum_value(request.type)
        document.description = request.description
        document.version += 1
        document.updated_at = utcnow()
        await documents.update(document)
        await self.uow.save_changes()
        self.touched(keys.related(keys.DOCUMENT_PREFIX, "project", document.project_id))
        return Success(DocumentDto.model_validate(document))

    async def delete_document(self, request: DeleteDocumentCommand) -> Result:
        documents = self.repo(Document)
        document = await documents.get_by_id(request.id)
        if document is None:
            return not_found("Document", request.id)
        await documents.remove(document)
        await self.uow.save_changes()
        self.touched(keys.related(keys.DOCUMENT_PREFIX, "project", document.project_id))
        return Success(True)

    async def get_document_by_id(self, request: GetDocumentByIdQuery) -> Result:
        return await self.read_entity(
            keys.entity(keys.DOCUMENT_PREFIX, request.id),
            DocumentDto, Document, request.id, "Document",
        )

    async def get_documents_by_project(self, request: GetDocumentsByProjectQuery) -> Result:
        return await self.read_list(
            keys.related(keys.DOCUMENT_PREFIX, "project", request.project_id),
            DocumentDto, Document, project_id=request.project_id,
        )

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.http import FileResponse

from backoffice.core.errors import not_found_response
from backoffice.core.permissions import PluginEnabled
from . import storage
from .models import FileItem
from .serializers import FileItemSerializer

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, PluginEnabled('files')])
def file_list_create(request):
    """List the user's files or register metadata for an external file"""
    if request.method == 'GET':
        files = FileItem.objects.filter(user=request.user).order_by('-updated_at', '-id')
        return Response(FileItemSerializer(files, many=True).data)

    serializer = FileItemSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save(user=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, PluginEnabled('files')])
def file_detail(request, pk):
    """Retrieve, update or delete a file; deleting also removes an uploaded file from disk"""
    item = FileItem.objects.filter(pk=pk, user=request.user).first()
    if item is None:
        return not_found_response('Item')

    if request.method == 'GET':
        return Response(FileItemSerializer(item).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = FileItemSerializer(item, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        storage.delete_stored_file(item.stored_name)
        item_id = item.pk
        item.delete()
        return Response({'message': 'Item deleted successfully', 'id': item_id})


@api_view(['POST'])
@permission_classes([IsAuthenticated, PluginEnabled('files')])
@parser_classes([MultiPartParser, FormParser])
def file_upload(request):
    """
    Upload one or more files (multipart field ``files``).

    The whole batch is rejected when any file breaks the count, size or
    type limits. Returns the created file records.
    """
    uploads = request.FILES.getlist('files')
    error = storage.check_uploads(uploads)
    if error:
        logger.info(f"Upload rejected for user {request.user.id}: {error}")
        return Response({'error': error}, status=status.HTTP_400_BAD_REQUEST)

    created = []
    for upload in uploads:
        stored_name = storage.save_upload(upload)
        created.append(FileItem.objects.create(
            user=request.user,
            name=upload.name or 'file',
            size=upload.size,
            mime_type=upload.content_type or None,
            url=storage.raw_url(stored_name),
            stored_name=stored_name,
        ))
    logger.info(f"User {request.user.id} uploaded {len(created)} file(s)")
    return Response(FileItemSerializer(created, many=True).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, PluginEnabled('files')])
def file_raw(request, filename):
    """Serve a stored file as a download named after the original filename"""
    item = FileItem.objects.filter(user=request.user, stored_name=filename).first()
    if item is None:
        return Response({'error': 'File not found'}, status=status.HTTP_404_NOT_FOUND)
    try:
        handle = open(storage.resolve_path(item.stored_name), 'rb')
    except FileNotFoundError:
        logger.warning(f"Stored file missing on disk: {item.stored_name}")
        return Response({'error': 'File not found'}, status=status.HTTP_404_NOT_FOUND)
    return FileResponse(
        handle,
        as_attachment=True,
        filename=item.name,
        content_type=item.mime_type or 'application/octet-stream',
    )

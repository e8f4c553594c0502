from io import BytesIO
from unittest.mock import patch

from botocore.exceptions import ClientError
from werkzeug.datastructures import FileStorage

from food_reviews.services.storage_service import StorageService, is_allowed_photo


def configured(public_domain='https://photos.example.com/'):
    return StorageService(
        bucket_name='food-photos',
        account_id='acct',
        access_key='key',
        secret_key='secret',
        public_domain=public_domain,
    )


def upload():
    return FileStorage(stream=BytesIO(b'img'), filename='My Plate.JPG', content_type='image/jpeg')


@patch('food_reviews.services.storage_service.boto3.client')
def test_upload_returns_public_url(mock_client, app):
    service = configured()

    url = service.upload_file(upload())

    assert url.startswith('https://photos.example.com/food-photos/')
    assert url.endswith('.jpg')
    args, kwargs = mock_client.return_value.upload_fileobj.call_args
    assert args[1] == 'food-photos'
    assert kwargs['ExtraArgs'] == {'ContentType': 'image/jpeg'}
    _, client_kwargs = mock_client.call_args
    assert client_kwargs['endpoint_url'] == 'https://acct.r2.cloudflarestorage.com'


@patch('food_reviews.services.storage_service.boto3.client')
def test_upload_error_returns_none(mock_client, app):
    mock_client.return_value.upload_fileobj.side_effect = ClientError(
        {'Error': {'Code': '500', 'Message': 'boom'}}, 'PutObject'
    )
    assert configured().upload_file(upload()) is None


def test_unconfigured_storage_does_not_upload(app):
    service = StorageService()
    assert not service.is_configured()
    assert service.upload_file(upload()) is None


@patch('food_reviews.services.storage_service.boto3.client')
def test_delete_file_strips_public_domain(mock_client, app):
    service = configured()
    assert service.delete_file('https://photos.example.com/food-photos/a.jpg') is True
    mock_client.return_value.delete_object.assert_called_once_with(
        Bucket='food-photos', Key='food-photos/a.jpg'
    )


def test_allowed_photo_extensions():
    assert is_allowed_photo('a.webp')
    assert is_allowed_photo('A.JPEG')
    assert not is_allowed_photo('a.pdf')
    assert not is_allowed_photo('noextension')

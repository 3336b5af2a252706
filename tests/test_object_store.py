import io

import boto3
import pytest
from botocore.stub import ANY, Stubber

from app.config import Settings
from app.services.object_store import ObjectStoreError, S3ObjectStore, public_object_url


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-west-2",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


def test_put_object_sends_content_type_and_acl(s3_client, settings):
    store = S3ObjectStore(settings, client=s3_client)
    body = io.BytesIO(b"mp4 data")
    with Stubber(s3_client) as stub:
        stub.add_response(
            "put_object",
            {"ETag": '"abc"'},
            {
                "Bucket": "tubely-test",
                "Key": "landscape/abc.mp4",
                "Body": ANY,
                "ContentType": "video/mp4",
                "ACL": "public-read",
            },
        )
        store.put_object("tubely-test", "landscape/abc.mp4", body, "video/mp4", "public-read")
        stub.assert_no_pending_responses()


def test_put_object_error_is_wrapped(s3_client, settings):
    store = S3ObjectStore(settings, client=s3_client)
    with Stubber(s3_client) as stub:
        stub.add_client_error("put_object", service_error_code="AccessDenied", http_status_code=403)
        with pytest.raises(ObjectStoreError):
            store.put_object("tubely-test", "k.mp4", io.BytesIO(b"x"), "video/mp4", "public-read")


def test_head_object_returns_metadata(s3_client, settings):
    store = S3ObjectStore(settings, client=s3_client)
    with Stubber(s3_client) as stub:
        stub.add_response(
            "head_object",
            {"ContentLength": 8, "ContentType": "video/mp4"},
            {"Bucket": "tubely-test", "Key": "landscape/abc.mp4"},
        )
        head = store.head_object("tubely-test", "landscape/abc.mp4")
    assert head["ContentLength"] == 8


def test_head_object_missing_key_raises(s3_client, settings):
    store = S3ObjectStore(settings, client=s3_client)
    with Stubber(s3_client) as stub:
        stub.add_client_error("head_object", service_error_code="404", http_status_code=404)
        with pytest.raises(ObjectStoreError):
            store.head_object("tubely-test", "missing.mp4")


def test_public_url_regional_bucket():
    settings = Settings(s3_bucket="tubely-123", s3_region="eu-central-1", public_base_url="")

    assert public_object_url(settings, "portrait/a_b-c.mp4") == (
        "https://tubely-123.s3.eu-central-1.amazonaws.com/portrait/a_b-c.mp4"
    )


def test_public_url_us_east_1_uses_global_host():
    settings = Settings(s3_bucket="tubely-123", s3_region="us-east-1", public_base_url="")

    assert public_object_url(settings, "other/x.mp4") == "https://tubely-123.s3.amazonaws.com/other/x.mp4"


def test_public_url_prefers_public_base_url():
    settings = Settings(public_base_url="https://cdn.example.com/")

    assert public_object_url(settings, "landscape/x.mp4") == "https://cdn.example.com/landscape/x.mp4"

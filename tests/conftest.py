"""Pytest configuration and shared fixtures."""

import pytest


@pytest.fixture
def base_url():
    return "https://primo.example.edu:1601"


@pytest.fixture
def sample_pipe_list_html():
    """Pipe list page with plain, linked, iconed and truncated rows."""
    return '''
    <html>
    <body>
    <table id="pipesTable">
        <tr class="header"><th>Name</th><th>Owner</th><th>Type</th><th>Stage</th><th>Status</th></tr>
        <tr class="pipeRow">
            <td class="pipeName">Daily_Aleph</td>
            <td class="pipeOwner">MAIN</td>
            <td class="pipeType">Regular</td>
            <td class="pipeStage">Finished</td>
            <td class="pipeStatus">completed</td>
            <td><a class="pipeHistory" href="/primo_publishing/admin/action/pipeHistory.do?pipeId=1&amp;name=Daily_Aleph">History</a></td>
        </tr>
        <tr class="pipeRow">
            <td class="pipeName">SFX_Full</td>
            <td class="pipeOwner">MAIN</td>
            <td class="pipeType">Update</td>
            <td class="pipeStage">Harvesting</td>
            <td class="pipeStatus"><a href="/primo_publishing/admin/action/pipeStatus.do?pipeId=2">Running</a></td>
            <td><a class="pipeHistory" href="/primo_publishing/admin/action/pipeHistory.do?pipeId=2&amp;name=SFX_Full">History</a></td>
        </tr>
        <tr class="pipeRow">
            <td class="pipeName">Institutional_Repository_Har...</td>
            <td class="pipeOwner">INST</td>
            <td class="pipeType">Regular</td>
            <td class="pipeStage">Normalization</td>
            <td class="pipeStatus">
                <a href="/primo_publishing/admin/action/pipeStatus.do?pipeId=3">Stopped Error</a>
                <img src="/images/error.gif" title="java.lang.NullPointerException
    at com.exlibris.Normalizer.run(Normalizer.java:42)
    at java.lang.Thread.run(Thread.java:745)">
            </td>
            <td><a class="pipeHistory" href="/primo_publishing/admin/action/pipeHistory.do?pipeId=3&amp;name=Institutional_Repository_Harvest&amp;x=1">History</a></td>
        </tr>
        <tr class="pipeRow">
            <td class="pipeName">Broken_Row</td>
            <td class="pipeOwner">MAIN</td>
        </tr>
        <tr class="pipeRow">
            <td class="pipeName">Legacy_Feed…</td>
            <td class="pipeOwner">MAIN</td>
            <td class="pipeStatus">terminated</td>
        </tr>
    </table>
    </body>
    </html>
    '''


@pytest.fixture
def sample_schedule_html():
    """Scheduled tasks page; row 1 is not a PIPE task."""
    return '''
    <html>
    <body>
    <table>
        <tr>
            <td id="owner-0">MAIN</td><td id="type-0">PIPE</td>
            <td id="processName-0">DailyHarvestJob</td><td id="enabled-0">Disabled</td>
        </tr>
        <tr>
            <td id="owner-1">MAIN</td><td id="type-1">INDEXING</td>
            <td id="processName-1">Indexing</td><td id="enabled-1">Disabled</td>
        </tr>
        <tr>
            <td id="owner-2">MAIN</td><td id="type-2">PIPE</td>
            <td id="processName-2">WeeklyHarvestJob</td><td id="enabled-2">Enabled</td>
        </tr>
        <tr>
            <td id="owner-4">MAIN</td><td id="type-4">PIPE</td>
            <td id="processName-4">OrphanJob</td><td id="enabled-4">Disabled</td>
        </tr>
    </table>
    </body>
    </html>
    '''


@pytest.fixture
def sample_job_detail_html():
    """Pipe status page with a start time."""
    return '''
    <html>
    <body>
    <table class="details">
        <tr><td>Pipe Name</td><td>SFX_Full</td></tr>
        <tr><td>Start Time:</td><td>2026-10-19 08:15:00</td></tr>
        <tr><td>Stage</td><td>Harvesting</td></tr>
    </table>
    </body>
    </html>
    '''

"""
GraphQL documents for the AniList API.

Values are always passed through ``variables``; user text is never
interpolated into a document.
"""

VIEWER_QUERY = """
query {
  Viewer {
    id
    name
  }
}
"""

MEDIA_QUERY = """
query ($id: Int) {
  Media(id: $id, type: ANIME) {
    id
    title {
      romaji
      english
      native
    }
    startDate {
      year
    }
    format
    status
    episodes
    mediaListEntry {
      id
      progress
      status
    }
  }
}
"""

SEARCH_QUERY = """
query ($search: String, $seasonYear: Int, $perPage: Int) {
  Page(page: 1, perPage: $perPage) {
    media(search: $search, type: ANIME, seasonYear: $seasonYear) {
      id
      title {
        romaji
        english
        native
      }
      startDate {
        year
      }
      format
      status
    }
  }
}
"""

CREATE_ENTRY_MUTATION = """
mutation ($mediaId: Int, $status: MediaListStatus, $progress: Int) {
  SaveMediaListEntry(mediaId: $mediaId, status: $status, progress: $progress) {
    id
    mediaId
    status
    progress
  }
}
"""

UPDATE_ENTRY_MUTATION = """
mutation ($id: Int, $progress: Int) {
  SaveMediaListEntry(id: $id, progress: $progress) {
    id
    mediaId
    status
    progress
  }
}
"""
